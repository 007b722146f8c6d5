import sys
import copy
import logging
from dataclasses import dataclass
from functools import partial
from typing import List, Optional
import requests
from rich.console import Console
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.message import Message
from textual.reactive import reactive
from textual.widgets import Input, Label, Static, TextArea
from mini_postman_focus import (
    BODY_FIELD_ID, METHOD_FIELD_ID, NAME_SLOT, SUBMIT_FIELD_ID, URL_FIELD_ID,
    VALUE_SLOT, Action, BodyCursor, FocusEngine, header_field_id, header_slot, is_header_id,
)
from mini_postman_request import RequestForm, ResponseState, submit_request
from mini_postman_settings import debug_enabled, initial_headers, load_settings, setup_logging
FOCUSED_COLOR = "#ff87af"
BLURRED_COLOR = "#585858"
HELP_TEXT = "ctrl+s submit | ctrl+n add header | ctrl+r remove header\n{press esc to quit}"
class FormField:
    """Mixin for every focusable form widget.

    Keys reach the focused widget first; the app decides whether a key is
    navigation (consumed here) or editing (left to the widget's own editor).
    """
    async def on_key(self, event: events.Key) -> None:
        if await self.app.route_key(self, event.key):
            event.prevent_default()
            event.stop()
    def on_click(self, event: events.Click) -> None:
        self.app.follow_click(self)
    def form_focus(self):
        self.set_class(True, "-form-focused")
        if self.screen.focused is not self:
            self.screen.set_focus(self)
    def form_blur(self):
        self.set_class(False, "-form-focused")
class MethodSelector(FormField, Static, can_focus=True):
    DEFAULT_CSS = """
    MethodSelector { height: 1; }
    """
    selected_index = reactive(0)
    def __init__(self, choices: List[str], **kwargs):
        super().__init__(**kwargs)
        self.choices = list(choices)
    def render(self):
        return radio_line(self.choices, self.selected_index)
class UrlInput(FormField, Input):
    pass
class BodyArea(FormField, TextArea):
    @property
    def body_cursor(self) -> BodyCursor:
        return BodyCursor(self.cursor_location[0], self.document.line_count)
class HeaderInput(FormField, Input):
    pass
class SubmitButton(FormField, Static, can_focus=True):
    DEFAULT_CSS = """
    SubmitButton { height: 1; width: auto; }
    """
    def render(self):
        return Text("[ Submit ]")
class FormScroll(VerticalScroll, can_focus=False):
    pass
class HeaderRow(Horizontal):
    DEFAULT_CSS = """
    HeaderRow { height: 1; }
    HeaderRow Label { width: auto; }
    """
    def __init__(self, name: str = "", value: str = ""):
        super().__init__(classes="header-row")
        self.name_input = HeaderInput(value=name, classes="header-name")
        self.value_input = HeaderInput(value=value, classes="header-value")
    def compose(self) -> ComposeResult:
        yield Label("Name: ")
        yield self.name_input
        yield Label(" Value: ")
        yield self.value_input
class ResponseCaptured(Message):
    def __init__(self, form: RequestForm, state: ResponseState):
        super().__init__()
        self.form = form
        self.state = state
@dataclass
class FinalView:
    form: RequestForm
    response: ResponseState
    choices: List[str]
    selected_index: int
def radio_line(choices: List[str], selected_index: int) -> str:
    return " ".join(f"({'•' if i == selected_index else ' '}) {c}" for i, c in enumerate(choices))
class MiniPostmanApp(App):
    CSS = f"""
    #form {{ padding: 0 1; }}
    .section {{ color: {BLURRED_COLOR}; margin-top: 1; }}
    .section.-form-focused {{ color: {FOCUSED_COLOR}; }}
    Input {{ border: none; height: 1; padding: 0; width: 1fr; }}
    Input.-form-focused {{ color: {FOCUSED_COLOR}; }}
    #url-row {{ height: 1; margin-top: 1; }}
    #url-row Label {{ width: auto; margin-top: 0; }}
    BodyArea {{ height: 8; }}
    #headers {{ height: auto; }}
    SubmitButton {{ margin-top: 1; color: {BLURRED_COLOR}; }}
    SubmitButton.-form-focused {{ color: {FOCUSED_COLOR}; text-style: bold; }}
    MethodSelector.-form-focused {{ color: {FOCUSED_COLOR}; }}
    #help, #debug {{ color: {BLURRED_COLOR}; margin-top: 1; }}
    #status {{ margin-top: 1; }}
    """
    ENABLE_COMMAND_PALETTE = False
    def __init__(self, settings: Optional[dict] = None, session: Optional[requests.Session] = None,
                 show_focus_id: bool = False):
        super().__init__()
        self.settings = settings if settings is not None else load_settings()
        self.session = session
        self.show_focus_id = show_focus_id
        self.engine = FocusEngine()
        self.response = ResponseState()
        self.busy = False
        self.header_rows: List[HeaderRow] = []
    def compose(self) -> ComposeResult:
        # form widgets need an active app
        limit = int(self.settings.get("url_char_limit") or 0)
        self.method_selector = MethodSelector(self.engine.choices, id="method")
        self.url_input = UrlInput(max_length=limit, id="url")
        self.body_area = BodyArea(show_line_numbers=False, id="body")
        self.body_area.placeholder = self.settings.get("body_placeholder", "")
        self.submit_button = SubmitButton(id="submit")
        self.header_rows = [HeaderRow(n, v) for n, v in initial_headers(self.settings)]
        with FormScroll(id="form"):
            yield Label("METHOD:", id="method-label", classes="section")
            yield self.method_selector
            with Horizontal(id="url-row"):
                yield Label("URL: ", id="url-label", classes="section")
                yield self.url_input
            yield Label("BODY:", id="body-label", classes="section")
            yield self.body_area
            yield Label("HEADERS:", id="headers-label", classes="section")
            with Vertical(id="headers"):
                yield Static("None", id="no-headers")
                yield from self.header_rows
            yield self.submit_button
            yield Static(HELP_TEXT, id="help")
            yield Static("", id="status")
            if self.show_focus_id:
                yield Static("", id="debug")
    def on_mount(self) -> None:
        self._project()
    async def on_key(self, event: events.Key) -> None:
        # only keys that no form field saw get here, e.g. with nothing focused
        if isinstance(self.focused, FormField):
            return
        event.prevent_default()
        await self.route_key(None, event.key)
        self._project()
    @property
    def header_count(self) -> int:
        return len(self.header_rows)
    def field_widget(self, field_id: int):
        if field_id == METHOD_FIELD_ID:
            return self.method_selector
        if field_id == URL_FIELD_ID:
            return self.url_input
        if field_id == BODY_FIELD_ID:
            return self.body_area
        if field_id == SUBMIT_FIELD_ID:
            return self.submit_button
        index, slot = header_slot(field_id, self.header_count)
        row = self.header_rows[index]
        return row.name_input if slot == NAME_SLOT else row.value_input
    def field_id_of(self, widget) -> Optional[int]:
        fixed = ((self.method_selector, METHOD_FIELD_ID), (self.url_input, URL_FIELD_ID),
                 (self.body_area, BODY_FIELD_ID), (self.submit_button, SUBMIT_FIELD_ID))
        for candidate, field_id in fixed:
            if widget is candidate:
                return field_id
        for index, row in enumerate(self.header_rows):
            if widget is row.name_input:
                return header_field_id(index)
            if widget is row.value_input:
                return header_field_id(index, VALUE_SLOT)
        return None
    async def route_key(self, widget, key: str) -> bool:
        """Returns True when the key was consumed as a form action."""
        if self.busy:
            if key == "escape":
                logging.info("Quit while a request was outstanding")
                self.exit()
            return True
        t = self.engine.handle_key(key, self.header_count, self.body_area.body_cursor)
        if t.action is Action.DELEGATE:
            # keys queued before a focus move must not edit the field left behind
            return widget is not self.field_widget(self.engine.current)
        if t.action is Action.QUIT:
            self.exit()
            return True
        if t.action is Action.SUBMIT:
            self.submit()
        elif t.action is Action.SELECT:
            self.method_selector.selected_index = t.selected_index
        elif t.action is Action.INDENT:
            self.body_area.insert(self.settings.get("indent", "  "))
        elif t.action is Action.ADD_HEADER:
            await self.add_header()
        elif t.action is Action.REMOVE_HEADER:
            self.remove_header()
        self._project()
        return True
    def follow_click(self, widget):
        field_id = self.field_id_of(widget)
        if self.busy or field_id is None or field_id == self.engine.current:
            return
        self.engine.focus_field(field_id, self.header_count)
        self._project()
    async def add_header(self):
        row = HeaderRow()
        self.header_rows.append(row)
        await self.query_one("#headers", Vertical).mount(row)
        self.engine.header_added(self.header_count)
        logging.info(f"Added header pair {self.header_count - 1}")
    def remove_header(self):
        index = self.engine.removal_index(self.header_count)
        if index is None:
            return
        row = self.header_rows.pop(index)
        # not awaited: the key being handled may belong to this row
        row.remove()
        self.engine.clamp(self.header_count)
        logging.info(f"Removed header pair {index}")
    def _project(self):
        current = self.engine.current
        for field_id, focused in self.engine.projection(self.header_count):
            widget = self.field_widget(field_id)
            if focused:
                widget.form_focus()
            else:
                widget.form_blur()
        self.query_one("#method-label").set_class(current == METHOD_FIELD_ID, "-form-focused")
        self.query_one("#url-label").set_class(current == URL_FIELD_ID, "-form-focused")
        self.query_one("#body-label").set_class(current == BODY_FIELD_ID, "-form-focused")
        self.query_one("#headers-label").set_class(is_header_id(current, self.header_count), "-form-focused")
        self.query_one("#no-headers").display = self.header_count == 0
        if self.show_focus_id:
            self.query_one("#debug", Static).update(f"Current selection: {current}")
    def snapshot(self) -> RequestForm:
        return RequestForm(
            method=self.engine.method,
            url=self.url_input.value,
            body=self.body_area.text,
            headers=tuple((r.name_input.value, r.value_input.value) for r in self.header_rows),
        )
    def submit(self):
        if self.busy:
            return
        self.busy = True
        form = self.snapshot()
        self.query_one("#status", Static).update("Sending…")
        self.run_worker(partial(self._send, form, copy.copy(self.response)),
                        name="submit", group="submit", thread=True, exclusive=True)
    def _send(self, form: RequestForm, state: ResponseState):
        try:
            state = submit_request(form, state, session=self.session)
        except Exception as e:
            logging.exception("Unexpected failure while submitting")
            state.summary = f"Unexpected error: {e}"
            state.error_kind = type(e).__name__
        self.post_message(ResponseCaptured(form, state))
    def on_response_captured(self, message: ResponseCaptured) -> None:
        self.response = message.state
        self.busy = False
        self.exit(FinalView(message.form, message.state, self.engine.choices, self.engine.selected_index))
def final_view_text(view: FinalView) -> Text:
    t = Text()
    t.append("METHOD:\n", style=BLURRED_COLOR)
    t.append(radio_line(view.choices, view.selected_index))
    t.append("\n\nURL: ", style=BLURRED_COLOR)
    t.append(view.form.url)
    t.append("\n\nBODY:\n", style=BLURRED_COLOR)
    t.append(view.form.body)
    t.append("\n\nHEADERS:", style=BLURRED_COLOR)
    if not view.form.headers:
        t.append("\nNone")
    for name, value in view.form.headers:
        t.append(f"\nName: {name} Value: {value}")
    t.append("\n\nRESPONSE:", style=BLURRED_COLOR)
    t.append("\n\n")
    t.append(view.response.summary)
    return t
def render_final_view(console: Console, view: FinalView):
    width = console.width
    console.print(final_view_text(view), highlight=False)
    console.print(Text(view.response.body), width=width, overflow="fold", highlight=False)
def main():
    debug = debug_enabled()
    settings = load_settings()
    setup_logging(settings, debug)
    try:
        app = MiniPostmanApp(settings=settings, show_focus_id=debug)
        view = app.run()
    except Exception as e:
        logging.exception("Could not start program")
        Console(stderr=True).print(f"Could not start program: {e}", markup=False)
        sys.exit(1)
    if app.return_code:
        sys.exit(app.return_code)
    if view is not None:
        render_final_view(Console(), view)
if __name__ == "__main__":
    main()
