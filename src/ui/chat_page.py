"""NiceGUI chat interface with streamed replies and image attachments."""

from nicegui import events, ui

from src.ui.conversation import (
    Conversation,
    ImageRejectedError,
    Message,
    stream_reply,
)
from src.ui.markdown import markdown_to_html

CUSTOM_CSS = """
<style>
    body { background: #212121; color: #EDEDED; }

    .nicegui-content { padding: 0; }

    .message-row { border-bottom: 1px solid #2B2B2B; }

    .message-user {
        background: #2A2A2A;
        border: 1px solid #3A3A3A;
        border-radius: 1rem;
    }

    .message-label {
        font-size: 11px;
        letter-spacing: 0.05em;
        text-transform: uppercase;
        color: #8A8A8A;
    }

    .message-body p, .message-body { line-height: 1.65; color: #EDEDED; }
    .message-body code { font-family: 'Menlo', 'Monaco', monospace; }
    .message-body a { color: #9ABBFF; }

    .input-box {
        background: #2A2A2A;
        border: 1px solid #3A3A3A;
        border-radius: 1rem;
    }
    .input-box:focus-within { box-shadow: 0 0 0 2px rgba(255, 255, 255, 0.1); }
    .input-box textarea { color: #EDEDED !important; }
</style>
"""

ENTER_TO_SEND = """(e) => {
    if (e.key === 'Enter' && !e.shiftKey) {
        e.preventDefault();
        emit();
    }
}"""


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    ui.dark_mode().enable()
    conversation = Conversation()

    messages_container: ui.column
    scroll_area: ui.scroll_area
    pending_container: ui.row
    input_field: ui.textarea
    image_btn: ui.button
    send_btn: ui.button
    upload: ui.upload
    content_views: dict[str, ui.html] = {}

    with ui.dialog() as alert_dialog, ui.card().classes("bg-[#2A2A2A]"):
        alert_label = ui.label()
        ui.button("OK", on_click=alert_dialog.close).props("flat")

    async def show_alert(message: str) -> None:
        alert_label.set_text(message)
        await alert_dialog

    def render_message(msg: Message) -> None:
        is_user = msg.role == "user"
        with ui.element("div").classes("w-full message-row"):
            with ui.column().classes("w-full max-w-3xl mx-auto px-4 py-6 gap-2"):
                ui.label("You" if is_user else "Assistant").classes("message-label")
                bubble = "message-user p-4 w-full" if is_user else "w-full"
                with ui.column().classes(bubble):
                    if msg.image is not None:
                        ui.image(msg.image.data_url).props("fit=contain").classes(
                            "mb-4 rounded-xl max-h-96 border border-[#3A3A3A]"
                        )
                    content_views[msg.id] = ui.html(
                        markdown_to_html(msg.content), sanitize=False
                    ).classes("message-body text-sm w-full")

    def refresh_messages() -> None:
        messages_container.clear()
        content_views.clear()
        with messages_container:
            if not conversation.messages:
                with ui.column().classes("w-full max-w-3xl mx-auto px-4 py-8"):
                    ui.label("Send a message (and optionally an image).").classes(
                        "text-[#B5B5B5]"
                    )
            else:
                for msg in conversation.messages:
                    render_message(msg)

    def update_controls() -> None:
        streaming = conversation.is_streaming
        text = input_field.value or ""
        send_btn.set_enabled(conversation.can_send(text, conversation.pending_image))
        image_btn.set_enabled(not streaming)
        input_field.set_enabled(not streaming)

    def on_update() -> None:
        """Re-render after a conversation change."""
        if len(content_views) != len(conversation.messages):
            refresh_messages()
        else:
            # Only the streaming placeholder changes in place
            last = conversation.messages[-1]
            content_views[last.id].set_content(markdown_to_html(last.content))
        update_controls()
        scroll_area.scroll_to(percent=1.0)

    def render_pending() -> None:
        pending_container.clear()
        pending_image = conversation.pending_image
        if pending_image is None:
            pending_container.set_visibility(False)
        else:
            pending_container.set_visibility(True)
            with pending_container:
                ui.image(pending_image.data_url).classes(
                    "h-16 w-16 rounded-xl border border-[#3A3A3A]"
                )
                ui.button("Remove image", on_click=remove_image).props(
                    "flat no-caps dense"
                ).classes("text-sm text-[#B5B5B5]")
        update_controls()

    def remove_image() -> None:
        conversation.clear_pending_image()
        render_pending()

    async def handle_upload(e: events.UploadEventArguments) -> None:
        upload.reset()
        try:
            conversation.attach_image(await e.file.read(), e.file.content_type)
        except ImageRejectedError as err:
            await show_alert(str(err))
            return
        render_pending()

    async def send_message() -> None:
        text = input_field.value or ""
        if not conversation.can_send(text, conversation.pending_image):
            return

        image = conversation.take_pending_image()
        input_field.value = ""
        render_pending()

        await stream_reply(conversation, text, image, on_update)

    # === UI Layout ===
    with ui.column().classes("w-full h-screen gap-0 bg-[#212121]"):
        # Header
        with ui.element("div").classes("w-full border-b border-[#2B2B2B]"):
            with ui.row().classes("max-w-3xl mx-auto px-4 py-4"):
                ui.label("BhattGPT").classes("text-base font-semibold tracking-tight")

        # Messages
        with ui.scroll_area().classes("flex-grow w-full") as scroll_area:
            messages_container = ui.column().classes("w-full gap-0")
            refresh_messages()

        # Input
        with ui.element("div").classes("w-full border-t border-[#2B2B2B] bg-[#212121]"):
            with ui.column().classes("max-w-3xl mx-auto px-4 py-4 w-full gap-3"):
                pending_container = ui.row().classes("items-center gap-3")
                with ui.row().classes("w-full gap-2 items-end no-wrap"):
                    upload = (
                        ui.upload(on_upload=handle_upload, auto_upload=True)
                        .props('accept="image/*"')
                        .classes("hidden")
                    )
                    image_btn = (
                        ui.button("+ Image", on_click=lambda: upload.run_method("pickFiles"))
                        .props("unelevated no-caps color=grey-9")
                        .classes("rounded-2xl border border-[#3A3A3A]")
                    )
                    with ui.element("div").classes("flex-grow input-box px-3 py-1"):
                        input_field = (
                            ui.textarea(placeholder="Message…")
                            .props("autogrow borderless dense rows=1 dark")
                            .classes("w-full")
                            .on("keydown", send_message, js_handler=ENTER_TO_SEND)
                        )
                    send_btn = (
                        ui.button("Send", on_click=send_message)
                        .props("unelevated no-caps color=grey-3 text-color=grey-10")
                        .classes("rounded-2xl font-medium")
                    )

    input_field.on_value_change(lambda _: update_controls())
    render_pending()
