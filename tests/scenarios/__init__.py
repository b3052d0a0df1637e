"""Бандлы фикстур для сквозных тестов установки."""
