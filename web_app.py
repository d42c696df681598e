"""
This is the main file for the web application.
It exposes the session content and image extraction operations as JSON routes.
"""

import json
import logging
from typing import Optional

from flask import Flask, request, jsonify

import config

# --- Logging Configuration ---
logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

from core.llm_engine import LLMEngine
from core.content_adapter import (
    ContentAdapter,
    ContentAdapterError,
    SESSION_PROMPTS,
)
from utils.media import MediaBlob

app = Flask(__name__)

# --- Adapter Initialization ---
logging.info("Initializing LLM engine and content adapter...")
llm_engine = LLMEngine(config.GEMINI_API_KEY)
content_adapter = ContentAdapter(llm_engine)
logging.info("Application initialization complete.")


def _json_body() -> dict:
    """Returns the JSON request body, or an empty dict when it is not an object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _image_from_request() -> Optional[MediaBlob]:
    """Reads the image from a multipart upload or a JSON data URL."""
    upload = request.files.get("image")
    if upload is not None and upload.filename:
        return MediaBlob.from_file(upload)

    data_url = _json_body().get("image")
    if data_url:
        if not isinstance(data_url, str):
            raise ValueError("Image must be a data URL string.")
        return MediaBlob.from_data_url(data_url)
    return None


# --- Routes ---

@app.route("/session_content", methods=["POST"])
def session_content():
    """Generates a description or quiz for a PE session topic."""
    data = _json_body()
    topic = data.get("topic")
    kind = data.get("kind", "description")
    logging.info(f"Received session content request: topic='{topic}', kind='{kind}'")
    if not topic or not isinstance(topic, str):
        return jsonify({"error": "Missing topic"}), 400
    if not isinstance(kind, str) or kind not in SESSION_PROMPTS:
        return jsonify({"error": f"Invalid kind '{kind}'"}), 400

    content = content_adapter.generate_session_content(topic, kind)
    logging.info(f"Sending content: '{content[:100]}...'")
    return jsonify({"content": content})


@app.route("/extract_names", methods=["POST"])
def extract_names():
    """Extracts student names from an uploaded class list image."""
    try:
        image = _image_from_request()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    if image is None:
        return jsonify({"error": "Missing image"}), 400

    try:
        names = content_adapter.extract_student_names_from_image(image)
    except ContentAdapterError as e:
        return jsonify({"error": str(e)}), 502
    logging.info(f"Extracted {len(names)} names")
    return jsonify({"names": names})


@app.route("/extract_grades", methods=["POST"])
def extract_grades():
    """Extracts per-term grades from an uploaded grade sheet image."""
    try:
        image = _image_from_request()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    if image is None:
        return jsonify({"error": "Missing image"}), 400

    try:
        grades = content_adapter.extract_grades_from_image(image)
    except ContentAdapterError as e:
        return jsonify({"error": str(e)}), 502
    except json.JSONDecodeError:
        logging.exception("Model returned malformed grade data")
        return jsonify({"error": "Model returned malformed grade data."}), 502
    logging.info(f"Extracted grades for {len(grades)} students")
    return jsonify({"grades": grades})


@app.errorhandler(404)
def page_not_found(e):
    return jsonify({"error": "Not found"}), 404


@app.errorhandler(500)
def internal_server_error(e):
    logging.exception("Internal Server Error")
    return jsonify({"error": "Internal server error"}), 500


# --- Run the App ---
if __name__ == "__main__":
    app.run(host=config.WEB_HOST, port=config.WEB_PORT, debug=True)
