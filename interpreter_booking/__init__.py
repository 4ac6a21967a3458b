"""Interpreter booking API: assignment state machine and billing rollup."""
