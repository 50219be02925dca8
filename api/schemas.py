from pydantic import BaseModel, ConfigDict, Field


class _Body(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class ExtractImagesRequest(_Body):
    productUrl: str = Field(min_length=1)


class ResolveImagesRequest(_Body):
    urls: list[str] = Field(min_length=1)


class ChatRequest(_Body):
    message: str = Field(min_length=1)
