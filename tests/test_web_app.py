import io
import json

import pytest
from unittest.mock import patch

from core.content_adapter import GradeExtractionError, NameExtractionError
from utils.media import MediaBlob
from web_app import app as flask_app  # Use a different name to avoid conflict


@pytest.fixture
def app():
    """Create and configure a new app instance for each test."""
    flask_app.config.update({
        "TESTING": True,
    })
    yield flask_app


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


def _upload(content=b"fake png bytes", filename="class.png"):
    return {"image": (io.BytesIO(content), filename)}


# --- Session Content ---

@patch('web_app.content_adapter')
def test_session_content_success(mock_adapter, client):
    mock_adapter.generate_session_content.return_value = "A fun session on juggling."

    response = client.post('/session_content', json={'topic': 'Juggling', 'kind': 'quiz'})

    assert response.status_code == 200
    assert response.get_json() == {"content": "A fun session on juggling."}
    mock_adapter.generate_session_content.assert_called_once_with('Juggling', 'quiz')


@patch('web_app.content_adapter')
def test_session_content_defaults_to_description(mock_adapter, client):
    mock_adapter.generate_session_content.return_value = "desc"

    client.post('/session_content', json={'topic': 'Rugby'})

    mock_adapter.generate_session_content.assert_called_once_with('Rugby', 'description')


@pytest.mark.parametrize("payload", [
    {},
    {'topic': ''},
    {'topic': 'Tennis', 'kind': 'essay'},
    {'topic': 'Tennis', 'kind': ['quiz']},
    {'topic': ['Tennis'], 'kind': 'quiz'},
    ['Tennis', 'quiz'],
    'Tennis',
])
@patch('web_app.content_adapter')
def test_session_content_bad_request(mock_adapter, client, payload):
    response = client.post('/session_content', json=payload)

    assert response.status_code == 400
    assert "error" in response.get_json()
    mock_adapter.generate_session_content.assert_not_called()


# --- Name Extraction ---

@patch('web_app.content_adapter')
def test_extract_names_from_upload(mock_adapter, client):
    mock_adapter.extract_student_names_from_image.return_value = ["Alice Smith", "Bob Jones"]

    response = client.post('/extract_names', data=_upload(), content_type='multipart/form-data')

    assert response.status_code == 200
    assert response.get_json() == {"names": ["Alice Smith", "Bob Jones"]}
    blob = mock_adapter.extract_student_names_from_image.call_args.args[0]
    assert isinstance(blob, MediaBlob)
    assert blob.data == b"fake png bytes"


@patch('web_app.content_adapter')
def test_extract_names_from_data_url(mock_adapter, client):
    mock_adapter.extract_student_names_from_image.return_value = ["Alice Smith"]

    response = client.post('/extract_names', json={'image': 'data:image/jpeg;base64,QUJD'})

    assert response.status_code == 200
    blob = mock_adapter.extract_student_names_from_image.call_args.args[0]
    assert blob == MediaBlob(data=b"ABC", mime_type="image/jpeg")


@pytest.mark.parametrize("payload", [{}, ['data:image/png;base64,QUJD']])
@patch('web_app.content_adapter')
def test_extract_names_missing_image(mock_adapter, client, payload):
    response = client.post('/extract_names', json=payload)

    assert response.status_code == 400
    mock_adapter.extract_student_names_from_image.assert_not_called()


@pytest.mark.parametrize("payload", [{'image': 'not a data url'}, {'image': ['data:image/png;base64,QUJD']}, {'image': 42}])
@patch('web_app.content_adapter')
def test_extract_names_invalid_image_payload(mock_adapter, client, payload):
    response = client.post('/extract_names', json=payload)

    assert response.status_code == 400
    mock_adapter.extract_student_names_from_image.assert_not_called()


@patch('web_app.content_adapter')
def test_extract_names_failure(mock_adapter, client):
    mock_adapter.extract_student_names_from_image.side_effect = NameExtractionError(
        "Failed to extract names from image. Please check your API key."
    )

    response = client.post('/extract_names', data=_upload(), content_type='multipart/form-data')

    assert response.status_code == 502
    assert response.get_json()["error"] == "Failed to extract names from image. Please check your API key."


# --- Grade Extraction ---

@patch('web_app.content_adapter')
def test_extract_grades_success(mock_adapter, client):
    mock_adapter.extract_grades_from_image.return_value = [{"name": "Alice", "note1": 5}]

    response = client.post('/extract_grades', data=_upload(filename="grades.png"), content_type='multipart/form-data')

    assert response.status_code == 200
    assert response.get_json() == {"grades": [{"name": "Alice", "note1": 5}]}


@patch('web_app.content_adapter')
def test_extract_grades_failure(mock_adapter, client):
    mock_adapter.extract_grades_from_image.side_effect = GradeExtractionError("Failed to extract grades from image.")

    response = client.post('/extract_grades', data=_upload(), content_type='multipart/form-data')

    assert response.status_code == 502
    assert response.get_json()["error"] == "Failed to extract grades from image."


@patch('web_app.content_adapter')
def test_extract_grades_malformed_reply(mock_adapter, client):
    mock_adapter.extract_grades_from_image.side_effect = json.JSONDecodeError("Expecting value", "oops", 0)

    response = client.post('/extract_grades', data=_upload(), content_type='multipart/form-data')

    assert response.status_code == 502
    assert response.get_json()["error"] == "Model returned malformed grade data."


def test_unknown_route_returns_json_404(client):
    response = client.get('/does_not_exist')

    assert response.status_code == 404
    assert response.get_json() == {"error": "Not found"}
