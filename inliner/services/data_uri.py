import base64
import binascii
from typing import Optional, Tuple

from inliner.core.exceptions import InvalidPayloadError


def decode_data_uri(value: str) -> Tuple[bytes, Optional[str]]:
    """
    Splits `data:<mime>;base64,<payload>` on the first comma and decodes the payload.
    Returns the raw bytes and the MIME type (None when the prefix carries none).
    """
    prefix, sep, payload = value.partition(",")
    if not sep:
        raise InvalidPayloadError("Inline image data is not a data URI")

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidPayloadError("Inline image data is not valid base64", original_error=e)

    mime = prefix.removeprefix("data:").split(";", 1)[0] or None
    return data, mime
