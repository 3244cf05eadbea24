from ..infrastructure.app_factory import create_application
from ..infrastructure.config.settings import get_settings
from ..interfaces.api import router as api_router

settings = get_settings()

app = create_application(
    router=api_router,
    settings=settings,
    summary="Document intake, analysis and reminders",
    description="""
    # PaperMind API

    Upload documents, get them summarized and turn what they ask of you into reminders.

    * **Documents**: upload PDFs and scans; text is extracted and analyzed into a summary,
      action items and tags
    * **Questions**: ask follow-up questions answered only from the document's text
    * **Reminders**: dated tasks, created by hand or from a document's action items

    Every endpoint requires a bearer token from the identity provider.
    """,
)
