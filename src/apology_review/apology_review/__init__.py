"""Apology Review package.

Feature modules (apologies, users, ...) with a thin Flask controller layer
over service/repository layers. The apology review workflow lives in
``apologies``: store, filter pipeline and the review state machine.
"""
