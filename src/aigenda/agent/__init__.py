"""Agent subsystem — bounded tool-calling loop over a completion service.

Modules:
    turns.py          # Turn records (user, assistant, tool call, tool result)
    parser.py         # JSON invocation extraction from model prose
    schema.py         # Capability/action/parameter schemas + validation
    registry.py       # Capability protocol and name-keyed registry
    memory.py         # Bounded conversation memory, JSON persistence
    confirmation.py   # Operator confirmation gate
    prompts.py        # Initial and continuation prompt templates
    continuation.py   # "More work remains" phrase heuristic
    orchestrator.py   # The loop itself
"""
