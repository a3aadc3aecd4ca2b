"""Typing-practice reader: documents, highlights and a vocabulary dictionary."""
