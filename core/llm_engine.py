"""
This module contains the LLMEngine, responsible for interacting with the
generative AI model.
"""
import logging
from typing import Any, List, Optional, Union

from google import genai
from google.genai import types

import config


class LLMEngineError(RuntimeError):
    """Raised when the engine cannot reach the model at all."""


class LLMEngine:
    """
    Owns the Gemini client and the model identifier used for every request.
    """
    def __init__(self, api_key: Optional[str], model_name: str = config.MODEL_NAME):
        """
        Initializes the LLM Engine.

        A missing key is logged rather than raised; requests made through an
        engine without a client fail when they are sent.
        """
        self.model_name = model_name
        self.client: Optional[genai.Client] = None
        if not api_key:
            logging.error(
                f"{config.API_KEY_ENV_VAR} is missing. Please add it to your "
                "environment variables or keys.json."
            )
        else:
            self.client = genai.Client(api_key=api_key)

    def generate(
        self,
        contents: Union[str, List[Any], types.Content],
        response_schema: Optional[types.Schema] = None,
    ) -> types.GenerateContentResponse:
        """Sends one generate_content request and returns the raw response."""
        if not self.client:
            raise LLMEngineError("Gemini client not initialized. Check API Key.")

        generation_config = None
        if response_schema is not None:
            generation_config = types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=response_schema,
            )

        logging.info(f"Sending request to {self.model_name} (schema={response_schema is not None})")
        return self.client.models.generate_content(
            model=self.model_name,
            contents=contents,
            config=generation_config,
        )
