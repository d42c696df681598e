"""
This module defines the ContentAdapter, which builds prompts for PE class
sessions, sends them to the LLM and turns the replies into values the
application can use.
"""
import json
import logging
from typing import BinaryIO, List, TypedDict, Union

from google.genai import types

from core.llm_engine import LLMEngine
from utils.media import MediaBlob

NO_CONTENT_MESSAGE = "No content generated."
GENERATION_FAILED_MESSAGE = "Failed to generate content. Please check your API key."
NAME_EXTRACTION_FAILED_MESSAGE = "Failed to extract names from image. Please check your API key."
GRADE_EXTRACTION_FAILED_MESSAGE = "Failed to extract grades from image."

SESSION_PROMPTS = {
    "description": (
        'Create a short, engaging description for a physical education session about "{topic}". '
        "Include 3 key learning objectives. Keep it under 150 words."
    ),
    "quiz": (
        'Create 3 multiple choice exam questions for a PE class session about "{topic}". '
        "Include the correct answer. Format as simple text."
    ),
}

NAMES_PROMPT = (
    "Extract the list of student names from this image. Return ONLY the names, one per line. "
    "Do not include numbers, grades, dates, or headers. Just the First and Last names."
)

GRADES_PROMPT = """
    Analyze this image of a grade sheet (handwritten or printed).
    Extract the student names and their scores for Term 1, Term 2, and Term 3 (if available).
    If a note is missing, use 0.
"""

GRADES_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(
        type=types.Type.OBJECT,
        properties={
            "name": types.Schema(type=types.Type.STRING),
            "note1": types.Schema(type=types.Type.NUMBER),
            "note2": types.Schema(type=types.Type.NUMBER),
            "note3": types.Schema(type=types.Type.NUMBER),
        },
        property_ordering=["name", "note1", "note2", "note3"],
        required=["name"],
    ),
)


class GradeRecord(TypedDict, total=False):
    name: str
    note1: float
    note2: float
    note3: float


class ContentAdapterError(Exception):
    """Base class for failures surfaced by the ContentAdapter."""


class NameExtractionError(ContentAdapterError):
    pass


class GradeExtractionError(ContentAdapterError):
    pass


ImageInput = Union[MediaBlob, BinaryIO]


def build_session_prompt(topic: str, kind: str) -> str:
    """Fills the description or quiz template with the session topic."""
    template = SESSION_PROMPTS.get(kind)
    if template is None:
        raise ValueError(f"Unknown session content kind: {kind!r}. Expected one of {sorted(SESSION_PROMPTS)}.")
    return template.format(topic=topic)


def parse_names(text: str) -> List[str]:
    """Splits the model's reply into one trimmed name per non-blank line."""
    return [line.strip() for line in text.split("\n") if line.strip()]


class ContentAdapter:
    """
    Stateless bridge between the application and the LLM. Every operation is a
    single request/response round trip.
    """
    def __init__(self, llm_engine: LLMEngine):
        self.llm_engine = llm_engine

    def _image_contents(self, image: ImageInput, prompt: str) -> types.Content:
        """Builds an inline image part followed by the instruction text."""
        blob = image if isinstance(image, MediaBlob) else MediaBlob.from_file(image)
        logging.info(f"Attaching {blob.mime_type} image ({len(blob.data)} bytes)")
        # The SDK base64-encodes inline bytes on the wire.
        return types.Content(
            role="user",
            parts=[
                types.Part.from_bytes(data=blob.data, mime_type=blob.mime_type),
                types.Part(text=prompt),
            ],
        )

    def generate_session_content(self, topic: str, kind: str) -> str:
        """Generates a session description or a short quiz about a topic.

        Failures never propagate; they are logged and replaced by a fixed message.
        """
        prompt = build_session_prompt(topic, kind)
        try:
            response = self.llm_engine.generate(prompt)
            return response.text or NO_CONTENT_MESSAGE
        except Exception:
            logging.exception("Gemini API Error")
            return GENERATION_FAILED_MESSAGE

    def extract_student_names_from_image(self, image: ImageInput) -> List[str]:
        """Reads a class list photo and returns the student names in order.

        Raises:
            NameExtractionError: The model call failed.
        """
        contents = self._image_contents(image, NAMES_PROMPT)
        try:
            response = self.llm_engine.generate(contents)
            text = response.text or ""
        except Exception:
            logging.exception("Gemini Vision Error")
            raise NameExtractionError(NAME_EXTRACTION_FAILED_MESSAGE) from None
        return parse_names(text)

    def extract_grades_from_image(self, image: ImageInput) -> List[GradeRecord]:
        """Reads a grade sheet photo and returns one record per student.

        Raises:
            GradeExtractionError: The model call failed.
            json.JSONDecodeError: The model returned text that is not JSON.
        """
        contents = self._image_contents(image, GRADES_PROMPT)
        try:
            response = self.llm_engine.generate(contents, response_schema=GRADES_SCHEMA)
            text = response.text
        except Exception:
            logging.exception("Gemini Grade Extraction Error")
            raise GradeExtractionError(GRADE_EXTRACTION_FAILED_MESSAGE) from None

        if not text:
            return []
        return json.loads(text)
