"""
Model catalogue.

Members are the names callers send; values are the OpenRouter model
identifiers that go on the wire.
"""

from enum import Enum


class ModelType(str, Enum):
    ChatGpt4_1 = "openai/gpt-4.1"
    ChatGpt4_1Mini = "openai/gpt-4.1-mini"
    ChatGpt4_1Nano = "openai/gpt-4.1-nano"
    ChatGpt4o = "openai/gpt-4o"
    ChatGpt4oMini = "openai/gpt-4o-mini"
    Gemini2_0Flash = "google/gemini-2.0-flash-001"
    Gemini2_0FlashLite = "google/gemini-2.0-flash-lite-001"
    Gemini2_5FlashPreview = "google/gemini-2.5-flash-preview"
    Gemma3_4B = "google/gemma-3-4b-it"
    Claude3_7Sonnet = "anthropic/claude-3.7-sonnet"
    Claude3_5Sonnet = "anthropic/claude-3.5-sonnet"
    Claude3_5Haiku = "anthropic/claude-3.5-haiku"
    Llama3_2_90bVisionInstruct = "meta-llama/llama-3.2-90b-vision-instruct"
    Llama3_2_11bVisionInstruct = "meta-llama/llama-3.2-11b-vision-instruct"
    DeepSeekR1 = "deepseek/deepseek-r1:free"
    MistralPixtralLarge = "mistralai/pixtral-large-2411"
    MistralPixtral12b = "mistralai/pixtral-12b"
    Qwen2_5Vl72bInstruct = "qwen/qwen2.5-vl-72b-instruct:free"
    Qwen2_5Vl7bInstruct = "qwen/qwen-2.5-vl-7b-instruct"
    AmazonNovaLiteV1 = "amazon/nova-lite-v1"
    Grok2Vision1212 = "x-ai/grok-2-vision-1212"
    MicrosoftPhi4MultimodalInstruct = "microsoft/phi-4-multimodal-instruct"

    @classmethod
    def parse(cls, value: str) -> "ModelType":
        """
        Accept either a member name ("ChatGpt4o") or a wire identifier
        ("openai/gpt-4o").

        Raises:
            ValueError: if the value names no known model
        """
        if isinstance(value, cls):
            return value
        if value in cls.__members__:
            return cls[value]
        return cls(value)


DEFAULT_MODEL = ModelType.ChatGpt4_1
