"""Pure selection, keyboard, accessibility and async-binding logic."""
