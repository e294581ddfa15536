"""ASGI entrypoint for the DIVERGE backend API."""

from diverge_backend.api.app import create_app
from diverge_backend.containers import build_container

app = create_app(build_container())
