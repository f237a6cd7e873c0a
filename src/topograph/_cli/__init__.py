"""Command line interface for topograph."""
