from fastapi import Request

from file_manager.registry import FileRegistry


def get_file_registry(request: Request) -> FileRegistry:
    """File registry dependency, built once in the app lifespan."""
    return request.app.state.registry
