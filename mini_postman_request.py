"""Builds, sends and captures the single request composed in the form."""
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple
import requests
NO_URL_MESSAGE = "No URL found.\n"
SEPARATOR = "\n\n--------------------\n"
READ_CHUNK_SIZE = 8192
HTML_SAFE_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}
class PipelineStage(Enum):
    IDLE = "idle"
    BUILDING = "building"
    EXECUTING = "executing"
    READING = "reading"
    DONE = "done"
class PipelineError(Exception):
    pass
class UserInputError(PipelineError):
    pass
class EncodingError(PipelineError):
    pass
class RequestConstructionError(PipelineError):
    pass
class TransportError(PipelineError):
    pass
class ResponseReadError(PipelineError):
    pass
@dataclass(frozen=True)
class RequestForm:
    method: str
    url: str
    body: str = ""
    headers: Tuple[Tuple[str, str], ...] = ()
@dataclass
class ResponseState:
    summary: str = ""
    body: str = ""
    error_kind: Optional[str] = None
    @property
    def captured(self) -> bool: return self.summary != ""
@dataclass
class Submission:
    form: RequestForm
    state: ResponseState = field(default_factory=ResponseState)
    url: str = ""
    stage: PipelineStage = PipelineStage.IDLE
    prepared: Optional[requests.PreparedRequest] = None
    trail: List[PipelineStage] = field(default_factory=list)
    def enter(self, stage: PipelineStage):
        logging.debug(f"Pipeline {self.stage.value} -> {stage.value}")
        self.stage = stage
        self.trail.append(stage)
def normalize_url(url: str) -> str:
    return url if "//" in url else "https://" + url
def encode_body(text: str) -> bytes:
    """The whole body text travels as one JSON string value, not a parsed document.

    HTML-sensitive characters and the JS line separators are written as
    ``\\uXXXX`` escapes, as HTML-safe JSON encoders emit them.
    """
    try:
        encoded = json.dumps(text, ensure_ascii=False)
        for char, escape in HTML_SAFE_ESCAPES.items():
            encoded = encoded.replace(char, escape)
        return encoded.encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodingError(str(e)) from e
def build_request(session: requests.Session, method: str, url: str, body: bytes,
                  headers) -> requests.PreparedRequest:
    req = requests.Request(method=method, url=url, data=body)
    for name, value in headers:
        if not str(name).strip():
            continue
        req.headers[name] = value
    try:
        return session.prepare_request(req)
    except (requests.exceptions.RequestException, ValueError) as e:
        raise RequestConstructionError(str(e)) from e
def format_summary(response: requests.Response) -> str:
    parts = [f"{response.status_code} {response.reason or ''}".rstrip(), SEPARATOR]
    for name, value in sorted(response.headers.items(), key=lambda kv: kv[0].lower()):
        parts.append(f"\n{name}: {value}")
    parts.append(SEPARATOR + "\n")
    return "".join(parts)
def read_body(response: requests.Response) -> Tuple[bytes, Optional[ResponseReadError]]:
    """Read everything; on failure keep what arrived and hand back the error."""
    chunks = []
    try:
        for chunk in response.iter_content(chunk_size=READ_CHUNK_SIZE):
            chunks.append(chunk)
    except (requests.exceptions.RequestException, OSError) as e:
        return b"".join(chunks), ResponseReadError(str(e))
    return b"".join(chunks), None
def decode_body(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")
def run_pipeline(form: RequestForm, state: Optional[ResponseState] = None,
                 session: Optional[requests.Session] = None) -> Submission:
    """Run the pipeline once and record the outcome in ``state``.

    ``state.summary`` is always overwritten. ``state.body`` is only replaced
    once a response has been received, so early failures leave the previous
    body in place. Errors never escape: they end up as summary text.
    """
    sub = Submission(form, state if state is not None else ResponseState())
    own_session = session is None
    session = session or requests.Session()
    sub.state.error_kind = None
    try:
        _run(sub, session)
    except PipelineError as e:
        logging.warning(f"Request failed during {sub.stage.value}: {type(e).__name__}: {e}")
        sub.state.summary = str(e)
        sub.state.error_kind = type(e).__name__
    finally:
        sub.enter(PipelineStage.DONE)
        if own_session:
            session.close()
    return sub
def submit_request(form: RequestForm, state: Optional[ResponseState] = None,
                   session: Optional[requests.Session] = None) -> ResponseState:
    return run_pipeline(form, state, session).state
def _run(sub: Submission, session: requests.Session):
    form, state = sub.form, sub.state
    sub.enter(PipelineStage.BUILDING)
    if form.url == "":
        raise UserInputError(NO_URL_MESSAGE)
    sub.url = normalize_url(form.url)
    body = encode_body(form.body)
    sub.prepared = build_request(session, form.method, sub.url, body, form.headers)
    sub.enter(PipelineStage.EXECUTING)
    logging.info(f"{form.method} {sub.url} ({len(body)} bytes, {len(form.headers)} headers)")
    try:
        response = session.send(sub.prepared, stream=True)
    except requests.exceptions.RequestException as e:
        raise TransportError(str(e)) from e
    try:
        sub.enter(PipelineStage.READING)
        summary = format_summary(response)
        raw, read_error = read_body(response)
    finally:
        response.close()
    if read_error is not None:
        logging.warning(f"Response body read failed: {read_error}")
        summary += str(read_error)
        state.error_kind = type(read_error).__name__
    logging.info(f"Response {response.status_code} ({len(raw)} bytes)")
    state.summary = summary
    state.body = decode_body(raw)
