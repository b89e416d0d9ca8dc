"""Core workout model, formulas, analytics and the session engine."""
