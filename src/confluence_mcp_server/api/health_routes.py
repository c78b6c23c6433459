from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])

@router.get("/health")
def health(request: Request):
    dispatcher = request.app.state.dispatcher
    return {
        "status": "ok",
        "confluence_api": dispatcher.client.base_url,
        "read_only": dispatcher.read_only,
    }
