"""Presentation helpers"""
