"""Explicit mapping functions between rows, domain objects and DTOs"""
