# -*- coding: utf-8 -*-
from __future__ import annotations

from functools import lru_cache

from fastmcp import FastMCP
from openai import OpenAI

from planner_server.config import load_settings
from planner_server.models import Event, User, UserRole
from planner_server.server import planner
from .assistant import ask_assistant, budget_advice, get_openai_client, import_timetable

mcp = FastMCP("AssistantServer")

settings = load_settings()


@lru_cache(maxsize=None)
def _client() -> OpenAI:
    return get_openai_client()


@mcp.tool()
def ask_planning_assistant(user_id: str, question: str, user_name: str = "") -> str:
    """Answer a question about the user's schedule, budget or studies.

    :param user_id: Id of the acting user.
    :param question: The natural language question.
    :param user_name: Display name for a friendlier answer.
    :return: A short natural language answer.
    """
    user = User(id=user_id, name=user_name, role=UserRole.STUDENT)
    return ask_assistant(_client(), question, user, planner.list_events(user), model=settings.openai_model)


@mcp.tool()
def get_budget_advice(user_id: str) -> str:
    """Give three budgeting tips based on the user's events.

    :param user_id: Id of the acting user.
    :return: A numbered list of tips.
    """
    events = planner.list_events(User(id=user_id))
    return budget_advice(_client(), events, model=settings.openai_model)


@mcp.tool()
def import_timetable_image(user_id: str, image_path_or_url: str, save: bool = True) -> list[Event]:
    """Extract classes from a timetable image and add them to the user's calendar.

    :param user_id: Id of the acting user.
    :param image_path_or_url: Local path or URL of the timetable image.
    :param save: Whether to store the extracted events (default True).
    :return: The extracted (and, if saved, stored) events.
    """
    events = import_timetable(_client(), image_path_or_url, model=settings.openai_model)
    if save:
        return planner.add_events(User(id=user_id), events)
    return events


if __name__ == "__main__":
    # Run as an MCP server over stdio
    mcp.run()
