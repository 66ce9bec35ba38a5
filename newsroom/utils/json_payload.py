import json
import logging
import re

from ..errors import ParseError

logger = logging.getLogger(__name__)

FENCED_BLOCK = re.compile(r'```(?:json|JSON)?\s*\n?([\s\S]*?)\n?```')

_decoder = json.JSONDecoder()


def extract_json_candidate(text):
    """
    Stage one: locate the JSON payload inside free-form model output.
    The first fenced code block holding a JSON value wins; otherwise the
    first '[' or '{' from which a complete JSON value decodes. When nothing
    decodes, a non-empty fenced block is handed on so decoding reports why.
    """
    if not text or not text.strip():
        raise ParseError("Model returned empty text", stage="extract", raw_text=text or '')

    first_fenced = None
    for fenced in FENCED_BLOCK.finditer(text):
        block = fenced.group(1).strip()
        if not block:
            continue
        if first_fenced is None:
            first_fenced = block
        if block[0] not in '[{':
            continue
        try:
            _, end = _decoder.raw_decode(block)
        except json.JSONDecodeError:
            continue
        return block[:end]

    for match in re.finditer(r'[\[{]', text):
        try:
            _, end = _decoder.raw_decode(text, match.start())
        except json.JSONDecodeError:
            continue
        return text[match.start():end]

    if first_fenced is not None:
        return first_fenced

    raise ParseError("No JSON array or object found in model output", stage="extract", raw_text=text)


def decode_json_candidate(candidate, raw_text=''):
    """Stage two: strict parse of the extracted candidate."""
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ParseError(f"Malformed JSON in model output: {e}", stage="decode", raw_text=raw_text or candidate)


def parse_model_json(text):
    """Extract then strictly parse the JSON payload of a model response."""
    candidate = extract_json_candidate(text)
    return decode_json_candidate(candidate, raw_text=text)


def as_list(payload):
    """Model output asked for an array sometimes arrives as a single object."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        return [payload]
    raise ParseError(f"Expected a JSON array, got {type(payload).__name__}", stage="validate",
                     raw_text=json.dumps(payload))
