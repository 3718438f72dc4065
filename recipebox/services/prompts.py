"""Fixed prompts for the Gemini extraction calls."""

RECIPE_JSON_SHAPE = """
{
  "name": "Recipe name",
  "description": "Optional description",
  "cuisine_type": "Optional cuisine type (e.g., Mexican, Italian)",
  "main_ingredient": "Optional main ingredient (e.g., Beef, Chicken)",
  "time_estimation": number in minutes,
  "servings": optional number,
  "health_score": optional number 0-100,
  "ingredients": [{"name": "ingredient name", "amount": "optional amount"}],
  "instructions": [{"instruction": "step text"}]
}
""".strip()


def build_image_extraction_prompt() -> str:
    """Prompt for a photo of a written or printed recipe (possibly one page of several)."""
    return f"""
You are a recipe extraction assistant. Extract recipe information from the provided
image of a written recipe and return it as JSON.

The JSON must have the following structure:
{RECIPE_JSON_SHAPE}

Rules:
- Read the image carefully and extract every ingredient and every step you can see.
- Keep ingredients and instructions in the order they appear in the image.
- For time_estimation, convert to minutes if needed (e.g. "1 hr 15 min" -> 75).
- The image may show only part of a recipe; extract what is visible and do not invent
  ingredients or steps that are not shown.
- Always give a name: use the visible heading, or a short description of the dish if there
  is none.
- If the image shows no time, set time_estimation to 0.
- Use null for optional fields that are not present.
- Return only the JSON object.
""".strip()


def build_text_extraction_prompt(text: str) -> str:
    """Prompt for free text, typically a spoken recipe transcript."""
    return f"""
You are a recipe extraction assistant. Extract recipe information from the provided
text and return it as JSON.

The JSON must have the following structure:
{RECIPE_JSON_SHAPE}

Rules:
- Parse the text carefully and extract all recipe information.
- Keep ingredients and instructions in the order they are mentioned.
- For time_estimation, convert to minutes if needed.
- Always give a name: use the one mentioned, or a short description of the dish.
- If no time is mentioned, make a reasonable guess; use 0 only if there is nothing to go on.
- Use null for optional fields that are not mentioned.
- Return only the JSON object.

Text:
{text}
""".strip()


def build_transcription_prompt() -> str:
    return (
        "Transcribe this audio recording of someone describing a recipe. "
        "Return only the spoken words as plain text, in English, without commentary."
    )
