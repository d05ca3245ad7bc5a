from baby_api.chat.handler import build_request, handle_query

__all__ = ["build_request", "handle_query"]
