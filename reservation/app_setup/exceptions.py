"""
Gestionnaires d'exceptions.
- HTTPException: corps JSON {"detail": ...} pour l'API.
- Pages de paiement (/payment/*, Accept: text/html): page d'erreur minimale lisible dans le popup.
"""
import html

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        accept = (request.headers.get("accept") or "").lower()
        if request.url.path.startswith("/payment/") and "text/html" in accept:
            detail = html.escape(str(exc.detail or "Erreur"))
            body = f"<!DOCTYPE html><html><body><h1>{exc.status_code}</h1><p>{detail}</p></body></html>"
            return HTMLResponse(body, status_code=exc.status_code)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))
