"""Chat service package.

- ``workflow``: guided workflow state and step tables
- ``store``: conversation id -> workflow storage
- ``guided``: the guided workflow engine
- ``tool_runner``: concurrent tool execution
- ``tool_calling``: the model + tools round trip (buffered and streamed)
- ``orchestrator``: per-message lifecycle tying them together
"""
