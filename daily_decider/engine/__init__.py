"""
Decision engine: orchestration, scoring, narrative, fallback and state.

Modules
-------
decision_engine : DecisionEngine.make_decision() — the public entry point.
scorer          : binary / multiple-choice / open-ended branches + refine_confidence().
narrative       : reasoning and follow-up text.
fallback        : crash-proof fallback_decision().
profile         : UserProfileStore + calculate_personal_alignment().
state           : EngineState, HistorySink / ProfileBackend protocols,
                  thread-safe in-memory implementations.
"""
