"""Requests domain - availability, time-off and complaint requests"""
