"""Pydantic models for the Seidel user operand."""

from models.operand import *
