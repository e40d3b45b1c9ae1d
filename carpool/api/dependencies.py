"""
FastAPI dependencies resolving the components wired in ``create_app``.
"""

from fastapi import Request

from carpool.services.match_engine import MatchEngine
from carpool.services.routing_provider import RoutingProvider


def get_match_engine(request: Request) -> MatchEngine:
    return request.app.state.match_engine


def get_routing_provider(request: Request) -> RoutingProvider:
    return request.app.state.routing_provider
