"""Schedules domain - weekly shift planning"""
