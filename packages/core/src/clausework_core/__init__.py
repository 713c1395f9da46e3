"""Core form model, paths and content addressing for clausework."""
