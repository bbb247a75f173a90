"""Example: drive the review workflow without Flask.

Controllers are a thin layer; loading, filtering and deciding all live in
the service/board objects.
"""

import importlib
import json

from config import get_settings_module

from src.apology_review.apology_review.apologies.filters import STAFF_REVIEW, FilterCriteria
from src.apology_review.apology_review.container import build_container
from src.apology_review.apology_review.core.enums import Role
from src.apology_review.apology_review.users.model import Viewer


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings)

    viewer = Viewer(user_id=1, full_name="Staff Demo", role=Role.STAFF)
    board = container.apology_service.page(viewer, STAFF_REVIEW, FilterCriteria(status="pending"))
    print(json.dumps(board.snapshot(), indent=2, default=str))


if __name__ == "__main__":
    main()
