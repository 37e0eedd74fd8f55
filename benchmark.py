#!/usr/bin/env python3
"""Performance benchmarking script for rubymap."""

import json
import subprocess
import sys
import time


def benchmark_project(project_path, project_name):
    """Run a cold export and time it."""
    print(f"\n{'='*70}")
    print(f"Benchmarking: {project_name}")
    print(f"Path: {project_path}")
    print(f"{'='*70}\n")

    cmd = [
        sys.executable,
        "-m", "rubymap.main",
        "export", project_path,
        "--no-cache"
    ]

    start = time.time()
    result = subprocess.run(cmd, capture_output=True, text=True)
    elapsed = time.time() - start

    if result.stderr:
        print(result.stderr, file=sys.stderr)

    definitions = relations = circular = 0
    if result.returncode == 0:
        document = json.loads(result.stdout)
        definitions = len(document['definitions'])
        relations = len(document['relations'])
        circular = sum(1 for r in document['relations'] if r['circular'])

    print(f"Total Time: {elapsed:.2f}s")

    return {
        'name': project_name,
        'total_time': elapsed,
        'definitions': definitions,
        'relations': relations,
        'circular': circular,
        'per_relation_ms': (elapsed * 1000 / relations) if relations else 0,
    }


if __name__ == "__main__":
    if len(sys.argv) > 1:
        benchmarks = [(path, path) for path in sys.argv[1:]]
    else:
        benchmarks = [
            ("../rubymap-gauntlet/rails", "Rails"),
            ("../rubymap-gauntlet/discourse", "Discourse"),
            ("../rubymap-gauntlet/rubocop", "RuboCop"),
        ]

    results = [benchmark_project(path, name) for path, name in benchmarks]

    print("\n" + "="*90)
    print("PERFORMANCE SUMMARY")
    print("="*90)
    print(f"{'Project':<15} {'Defs':<8} {'Relations':<10} {'Circular':<10} {'Total Time':<12} {'ms/Relation':<12}")
    print("-"*90)

    for r in results:
        print(f"{r['name']:<15} {r['definitions']:<8} {r['relations']:<10} {r['circular']:<10} "
              f"{r['total_time']:<12.2f} {r['per_relation_ms']:<12.4f}")

    print("-"*90)
