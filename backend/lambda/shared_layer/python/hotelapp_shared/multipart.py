"""hotelapp_shared.multipart: multipart/form-data parsing for proxy events.

API Gateway hands the raw form body to the function; this module splits it
into text fields and file parts using the standard library MIME parser.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from email import policy
from email.parser import BytesParser
from email.utils import collapse_rfc2231_value
from typing import Dict, List, Optional


class MultipartError(ValueError):
    """Body is not a parseable multipart/form-data payload."""


@dataclass
class FilePart:
    field_name: str
    file_name: str
    content_type: str
    data: bytes


@dataclass
class MultipartForm:
    fields: Dict[str, str] = field(default_factory=dict)
    files: List[FilePart] = field(default_factory=list)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.fields.get(name, default)

    @property
    def first_file(self) -> Optional[FilePart]:
        return self.files[0] if self.files else None


def _boundary_from_body(body: bytes) -> Optional[str]:
    """Boundary taken from the first delimiter line of the body, if any."""
    first_line = body.lstrip(b"\r\n").split(b"\n", 1)[0].rstrip(b"\r")
    if not first_line.startswith(b"--") or len(first_line) <= 2:
        return None
    return first_line[2:].decode("latin-1").strip()


def _param(part, name: str) -> Optional[str]:
    value = part.get_param(name, header="content-disposition")
    if value is None:
        return None
    return collapse_rfc2231_value(value)


def parse_multipart(body: bytes, content_type: str = "") -> MultipartForm:
    """Parse a multipart/form-data body.

    The boundary comes from ``content_type``; when that header is missing or
    carries no boundary, the first delimiter line of the body is used.

    Raises MultipartError if the body cannot be split into parts.
    """
    ctype = (content_type or "").strip()
    if "boundary=" not in ctype.lower():
        boundary = _boundary_from_body(body)
        if not boundary:
            raise MultipartError("Missing multipart boundary.")
        ctype = f'multipart/form-data; boundary="{boundary}"'
    elif not ctype.lower().startswith("multipart/"):
        raise MultipartError(f"Unsupported content type: {ctype}")

    preamble = f"Content-Type: {ctype}\r\nMIME-Version: 1.0\r\n\r\n".encode("latin-1")
    message = BytesParser(policy=policy.HTTP).parsebytes(preamble + body)
    if not message.is_multipart():
        raise MultipartError("Body does not contain any form parts.")

    form = MultipartForm()
    for part in message.iter_parts():
        name = _param(part, "name") or ""
        payload = part.get_payload(decode=True) or b""
        file_name = part.get_filename()
        if file_name is not None:
            if not file_name and not payload:
                # Browsers send an empty part when no file was chosen.
                continue
            form.files.append(
                FilePart(
                    field_name=name,
                    file_name=file_name,
                    content_type=(
                        part.get_content_type()
                        if part.get("Content-Type")
                        else "application/octet-stream"
                    ),
                    data=payload,
                )
            )
        elif name:
            charset = part.get_content_charset() or "utf-8"
            form.fields[name] = payload.decode(charset, errors="replace")
    return form
