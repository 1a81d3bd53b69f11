"""Collaboration Service test contracts"""
