"""Textual presentation of the controller."""
