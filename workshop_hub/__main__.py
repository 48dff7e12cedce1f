"""Allows `python -m workshop_hub` to serve the API with uvicorn."""

if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    from workshop_hub.core.config import get_settings
    from workshop_hub.main import create_app

    uvicorn.run(create_app(get_settings()), host="0.0.0.0", port=8000)
