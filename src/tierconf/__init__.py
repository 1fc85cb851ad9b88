"""tierconf: configuration resolution for the agentic framework bootstrapper.

Deep-merges generated settings into a project's existing host settings and
resolves which discovered model backs each of the strong, medium and weak
agent tiers.
"""
