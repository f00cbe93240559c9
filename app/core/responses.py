"""Response classes shared by the application."""

from fastapi.responses import JSONResponse


class UTF8JSONResponse(JSONResponse):
    """JSON response that declares its UTF-8 charset explicitly."""

    media_type = "application/json; charset=utf-8"
