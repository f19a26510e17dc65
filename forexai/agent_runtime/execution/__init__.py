"""Execution pipeline for the agent runtime.

- **prompt**: Instruction rendering (Jinja2 against the RunContext) and prompt composition
- **output**: Output reducers (``last_non_empty``, text / context conversion)
- **runner**: Pipeline runner (session resolve -> stages -> result / error events)
"""
