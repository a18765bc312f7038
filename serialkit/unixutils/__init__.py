"""Pipe and select helpers for file descriptors."""