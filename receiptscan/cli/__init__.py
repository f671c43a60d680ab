"""Unified command-line interface for receiptscan.

Usage:
    receiptscan replay <frames.jsonl>
    receiptscan replay <frames.jsonl> --images --config scan.toml
    receiptscan skew <frames.jsonl>
    receiptscan serve [--host] [--port]
"""
