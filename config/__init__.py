"""
Configuration for the Smart Meeting Scheduler
"""
