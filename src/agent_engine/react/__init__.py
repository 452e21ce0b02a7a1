"""
Single-agent ReAct loop.

  parser.py  -- marker grammar and the response parser
  models.py  -- Step trace entries and the AgentRun outcome
  engine.py  -- ReActEngine and ReActConfig
"""
from .engine import ReActConfig, ReActEngine
from .models import AgentRun, RunStatus, Step
from .parser import MarkerGrammar, ParsedResponse, ResponseParser, parse_response
