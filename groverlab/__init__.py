"""
Grover search demos on a small state-vector engine.

`groverlab.quantum` holds the search machinery (engine, oracles, driver, retry
loop) and is usable on its own; `groverlab.problems` wires it to the graph
coloring, ISBN and random number demos.
"""
