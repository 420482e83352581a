"""Chatbot flow builder: flow graph state, validation and a NiceGUI editor."""

__version__ = "0.1.0"
