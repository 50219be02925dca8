import logging

from google import genai
from google.genai import types

from . import config
from .errors import ConfigError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    'You are "RIGRATER AI", a helpful and creative assistant for a tech review website focused on '
    "PC hardware, gaming peripherals, and accessories.\n"
    "Your tone should be knowledgeable, enthusiastic, and slightly informal. You are brainstorming "
    "with the site owner.\n"
    "Your goal is to provide interesting ideas, suggest content, and help with creative tasks.\n"
    "Keep your responses concise, well-structured (using Markdown like lists, bold text etc.), "
    "and directly helpful."
)

SAFETY_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
)


def safety_settings() -> list[types.SafetySetting]:
    return [
        types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_ONLY_HIGH)
        for category in SAFETY_CATEGORIES
    ]


def build_prompt(message: str) -> str:
    return f'The user\'s request is: "{message}"\n\nProvide a helpful and creative response.'


class ChatClient:
    """Thin wrapper over a Gemini client with the site's fixed prompt and safety settings."""

    def __init__(self, client: genai.Client, model: str = config.GEMINI_MODEL):
        self.client = client
        self.model = model
        self.generation_config = types.GenerateContentConfig(
            system_instruction=SYSTEM_PROMPT,
            safety_settings=safety_settings(),
        )

    def reply(self, message: str) -> str:
        response = self.client.models.generate_content(
            model=self.model,
            contents=build_prompt(message),
            config=self.generation_config,
        )
        text = response.text
        if not text:
            raise RuntimeError("Gemini returned an empty response")
        return text.strip()


def build_chat_client(api_key: str | None = None, model: str | None = None) -> ChatClient:
    """Create the process-wide chat client. A missing key is a deployment error."""
    api_key = api_key or config.GEMINI_API_KEY
    if not api_key:
        raise ConfigError("Missing GEMINI_API_KEY environment variable")
    logger.info("Gemini chat client configured (model=%s)", model or config.GEMINI_MODEL)
    return ChatClient(genai.Client(api_key=api_key), model=model or config.GEMINI_MODEL)
