"""
Independent, stateless analysers feeding the decision engine.

Modules
-------
base      : Analyzer protocol — ``analyze(input) -> Signal``.
sentiment : SentimentAnalyzer — lexical polarity.
temporal  : TemporalProcessor — clock-derived factors + optimal-window lookahead.
pattern   : PatternMatcher + question_hash() — similarity to recorded decisions.
context   : ContextAnalyzer + assess_complexity() — urgency, clarity, framing.
"""
