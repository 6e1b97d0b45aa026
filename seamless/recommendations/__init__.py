"""
Room recommendation engine.

Responsibilities:
- Narrow the room table to structural candidates (area, capacity, spend, etc.).
- Retrieve rooms whose free-text notes match a guest's question.
- Score every room against the requirements with explainable reasons.
- Group rooms by restaurant and split them into top picks and others.
"""
