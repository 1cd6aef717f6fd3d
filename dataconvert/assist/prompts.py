"""
System and user prompts for the generative assist backend.
"""

from .base import AssistRequest, AssistTask

CONVERT_SYSTEM_PROMPT = """You are an expert in data format conversion. Your task is to convert data from one format to another while keeping its structure and integrity.

Important rules:
1. Keep the hierarchical structure of the data
2. Preserve all values and data types
3. Use proper formatting and indentation
4. For CSV, use commas as separators and quotes when needed
5. For XML, use appropriate tags and a valid structure
6. For JSON, use valid syntax with double quotes
7. For YAML, use correct indentation with spaces

Reply ONLY with the converted data, without any additional explanation."""

FORMAT_SYSTEM_PROMPT = """You are an automatic data formatter. Your task is to correctly format and indent data in the specified format.

Formatting rules:
- JSON: 2-space indentation, well-structured objects and arrays
- XML: 2-space indentation, well-organized tags
- YAML: correct indentation with spaces (no tabs)
- CSV: aligned columns, quotes when needed

Reply ONLY with the formatted data, without any additional explanation."""

VALIDATE_SYSTEM_PROMPT = """You are a syntax validator for data formats. Analyze whether the data provided is in a valid format.

Reply ONLY with a JSON object of the form:
{
  "valid": true/false,
  "message": "explanatory message"
}

For each format:
- JSON: check valid syntax, quoted keys, correct commas
- XML: check balanced tags, valid syntax
- YAML: check indentation, valid syntax
- CSV: check a consistent column structure"""

SYSTEM_PROMPTS = {
    AssistTask.CONVERT: CONVERT_SYSTEM_PROMPT,
    AssistTask.FORMAT: FORMAT_SYSTEM_PROMPT,
    AssistTask.VALIDATE: VALIDATE_SYSTEM_PROMPT,
}


def build_messages(request: AssistRequest) -> list:
    """Build the chat messages for an assist request."""
    source = request.source_format.value.upper()
    if request.task == AssistTask.CONVERT:
        prompt = f"Convert the following data from {source} to {request.target_format.value.upper()}:\n\n{request.data}"
    elif request.task == AssistTask.FORMAT:
        prompt = f"Format and correctly indent the following {source} data:\n\n{request.data}"
    else:
        prompt = f"Validate the syntax of the following data in {source} format:\n\n{request.data}"

    return [
        {"role": "system", "content": SYSTEM_PROMPTS[request.task]},
        {"role": "user", "content": prompt},
    ]
