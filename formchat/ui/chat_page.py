"""NiceGUI public chat page with streamed agent replies."""

import logging
from datetime import datetime

from nicegui import ui

from formchat.chat.session import ChatSession
from formchat.client.conversation import ConversationApi
from formchat.client.errors import ApiError, ConversationError
from formchat.client.http import ApiClient
from formchat.models.schemas import ChatMessage, MessageRole

logger = logging.getLogger(__name__)

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    body { background: #f7f7f8; min-height: 100vh; }

    .chat-shell {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.08);
        overflow: hidden;
    }

    .message-user {
        background: var(--agent-color, #0f766e);
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }

    .avatar-user { background: var(--agent-color, #0f766e); }
    .avatar-assistant { background: #6b7280; }

    .typing-dot {
        width: 8px; height: 8px;
        background: var(--agent-color, #0f766e);
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }

    .field-chip { border-radius: 9999px; }
    .field-chip-done { background: #ccfbf1; color: #0f766e; }
    .field-chip-pending { background: #f3f4f6; color: #6b7280; }
</style>
"""

# Field chips are only shown for short forms
MAX_FIELD_CHIPS = 8

_conversation_api: ConversationApi | None = None


def get_conversation_api() -> ConversationApi:
    """Get or create the process-wide conversation client.

    Returns:
        The ConversationApi instance.
    """
    global _conversation_api
    if _conversation_api is None:
        _conversation_api = ConversationApi(ApiClient())
    return _conversation_api


def format_time(timestamp: str) -> str:
    """Render an ISO timestamp as a short local clock time."""
    try:
        return datetime.fromisoformat(timestamp).astimezone().strftime("%I:%M %p")
    except ValueError:
        return ""


def is_password_error(error: ConversationError) -> bool:
    if isinstance(error, ApiError) and error.status_code in (401, 403):
        return True
    return "password" in str(error).lower()


@ui.page("/chat/{slug}")
async def chat_page(slug: str) -> None:
    """Public chat page for the agent published under ``slug``."""
    ui.add_head_html(CUSTOM_CSS)
    session = ChatSession(get_conversation_api())

    header_title: ui.label
    messages_container: ui.column
    progress_container: ui.column
    input_row: ui.row
    completion_row: ui.row
    input_field: ui.textarea
    send_btn: ui.button

    def render_avatar(is_user: bool) -> None:
        css = "avatar-user" if is_user else "avatar-assistant"
        icon = "person" if is_user else "smart_toy"
        with ui.element("div").classes(
            f"w-9 h-9 rounded-full flex items-center justify-center {css}"
        ):
            ui.icon(icon).classes("text-white text-lg")

    def render_typing_indicator() -> None:
        with ui.row().classes("w-full justify-start gap-3 items-end"):
            render_avatar(False)
            with ui.element("div").classes("message-assistant px-4 py-3"):
                with ui.row().classes("gap-1"):
                    for _ in range(3):
                        ui.element("div").classes("typing-dot")

    def render_message(msg: ChatMessage) -> None:
        is_user = msg.role == MessageRole.USER
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-assistant"

        with ui.row().classes(f"w-full {align} gap-3 items-end"):
            if not is_user:
                render_avatar(False)
            with ui.column().classes("max-w-[70%] gap-1"):
                with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                    if is_user:
                        ui.label(msg.content).classes("text-sm whitespace-pre-wrap")
                    else:
                        ui.markdown(msg.content).classes("text-sm leading-relaxed")
                if msg.field_key and not is_user:
                    ui.label(f"Captured {msg.field_key}").classes(
                        "text-[10px] text-teal-700 self-start"
                    )
                ui.label(format_time(msg.timestamp)).classes(
                    f"text-[10px] text-gray-400 {'self-end' if is_user else 'self-start'}"
                )
            if is_user:
                render_avatar(True)

    def refresh_progress() -> None:
        progress_container.clear()
        if session.state is None or not session.state.required_fields:
            return
        progress = session.progress()
        with progress_container:
            with ui.row().classes("w-full justify-between text-sm"):
                ui.label(
                    f"Progress: {progress.completed} of {progress.total} required fields"
                ).classes("font-medium")
                ui.label(f"{round(progress.percent)}%").classes("text-gray-500")
            ui.linear_progress(value=progress.percent / 100, show_value=False).props(
                "rounded color=teal"
            )
            if progress.total <= MAX_FIELD_CHIPS:
                with ui.row().classes("gap-2 pt-1"):
                    for key in session.state.required_fields:
                        done = key not in progress.pending
                        chip = "field-chip-done" if done else "field-chip-pending"
                        with ui.row().classes(
                            f"field-chip {chip} items-center gap-1 px-2 py-1 text-xs"
                        ):
                            ui.icon("check_circle" if done else "radio_button_unchecked")
                            ui.label(key)

    def refresh() -> None:
        messages_container.clear()
        with messages_container:
            if not session.messages and session.agent and session.agent.welcome_message:
                with ui.element("div").classes("bg-white border rounded-2xl p-6 shadow-sm"):
                    ui.markdown(session.agent.welcome_message)
            for msg in session.messages:
                # The empty placeholder is drawn as the typing indicator
                if session.is_streaming and msg.role == MessageRole.ASSISTANT and not msg.content:
                    continue
                render_message(msg)
            if session.is_streaming:
                render_typing_indicator()
        refresh_progress()

        input_row.set_visibility(session.state is not None and not session.is_completed)
        completion_row.set_visibility(session.is_completed)
        if session.is_streaming:
            send_btn.disable()
        else:
            send_btn.enable()
        if session.state is not None and session.state.current_field:
            input_field.props(f'placeholder="Enter {session.state.current_field}..."')
        else:
            input_field.props('placeholder="Type your message..."')

    async def send_message() -> None:
        text = input_field.value.strip()
        if not text or session.is_streaming:
            return

        input_field.value = ""
        field_key = session.state.current_field if session.state else None
        try:
            await session.send(
                text,
                field_key=field_key,
                field_value=text if field_key else None,
                on_update=refresh,
            )
        except ConversationError:
            ui.notify("Failed to send message", type="negative")
        refresh()
        if session.is_completed:
            ui.notify("Conversation completed!", type="positive")

    async def start_conversation(password: str | None = None) -> None:
        try:
            await session.start(slug, password=password)
        except ConversationError as e:
            if is_password_error(e):
                if password is not None:
                    ui.notify(str(e) or "Invalid password", type="negative")
                password_dialog.open()
            else:
                logger.warning(f"Could not start conversation for {slug}: {e}")
                ui.notify("Failed to start conversation", type="negative")
            return

        password_dialog.close()
        if session.agent is not None:
            header_title.set_text(session.agent.name)
            if session.agent.primary_color:
                ui.query("body").style(f"--agent-color: {session.agent.primary_color}")
        refresh()

    async def submit_password() -> None:
        if not password_input.value.strip():
            ui.notify("Please enter a password", type="warning")
            return
        await start_conversation(password_input.value)

    # === Password prompt ===
    with ui.dialog().props("persistent") as password_dialog, ui.card().classes("w-96"):
        ui.label("This agent is password protected").classes("text-lg font-semibold")
        password_input = ui.input("Password", password=True, password_toggle_button=True).classes(
            "w-full"
        )
        password_input.on("keydown.enter", submit_password)
        ui.button("Start", on_click=submit_password).classes("self-end")

    # === UI Layout ===
    with (
        ui.element("div").classes("w-full min-h-screen p-4 md:p-8"),
        ui.column().classes("w-full max-w-3xl mx-auto chat-shell").style(
            "height: calc(100vh - 4rem)"
        ),
    ):
        # Header
        with ui.row().classes("w-full px-5 py-4 items-center gap-3 border-b"):
            ui.icon("smart_toy").classes("text-3xl text-teal-700")
            with ui.column().classes("gap-0"):
                header_title = ui.label("Loading conversation...").classes(
                    "text-lg font-semibold"
                )
                ui.label("Conversational Form").classes("text-xs text-gray-500")

        # Messages
        with (
            ui.scroll_area().classes("flex-grow w-full bg-gray-50"),
            ui.column().classes("w-full p-5"),
        ):
            messages_container = ui.column().classes("w-full gap-4")

        # Progress
        progress_container = ui.column().classes("w-full px-5 py-2 gap-2 border-t")

        # Input
        with ui.row().classes("w-full p-4 gap-3 items-end bg-white border-t") as input_row:
            input_field = (
                ui.textarea(placeholder="Type your message...")
                .props("autogrow outlined dense rows=1")
                .classes("flex-grow")
                .on("keydown.enter.prevent", send_message)
            )
            send_btn = ui.button(icon="send", on_click=send_message).props(
                "round unelevated color=teal"
            )

        # Completion
        with ui.row().classes("w-full p-6 justify-center border-t") as completion_row:
            ui.icon("task_alt").classes("text-4xl text-teal-700")
            ui.label("Thank you! Your responses have been submitted.").classes(
                "text-lg font-medium"
            )

    input_row.set_visibility(False)
    completion_row.set_visibility(False)
    ui.timer(0.1, start_conversation, once=True)
