from syllabus_ai.prompts.syllabus_prompts import (
    PROMPT_VERSION,
    build_system_prompt,
    build_user_prompt,
    build_vision_prompt,
)

__all__ = ["PROMPT_VERSION", "build_system_prompt", "build_user_prompt", "build_vision_prompt"]
