#!/usr/bin/env python3
"""
Example: Profiling script execution from Python
"""

from skript_profiler import MetricKey, ProfilerSession, load_config

config = load_config(scripts_dir="plugins/Skript/scripts")
session = ProfilerSession(config, load_sampler=lambda: 19.6)
session.start()

# A host times elements as they run, either with the context manager...
with session.aggregator.span("plugins/Skript/scripts/shop.sk", 5, "event", "on join"):
    pass

# ...or with explicit handles when begin and end happen in different places
handle = session.aggregator.begin_span("loop all players")
session.aggregator.end_span(handle, "plugins/Skript/scripts/shop.sk", 7, "loop")

# Elements that are only counted
session.aggregator.record_occurrence(MetricKey("plugins/Skript/scripts/shop.sk", 11, "function"))

session.stop()

for issue in session.analyze():
    print(f"[{issue.severity.label}] {issue.kind.display_name} at {issue.location}")
    print(f"  {issue.description}")
    print(f"  -> {issue.suggestion}")

print(session.report(detailed=True))
