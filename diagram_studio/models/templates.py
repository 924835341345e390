"""Built-in Mermaid starting points."""
from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel


class DiagramType(str, Enum):
    FLOWCHART = "Flowchart"
    SEQUENCE = "Sequence"
    CLASS = "Class"
    STATE = "State"
    GANTT = "Gantt"
    PIE = "Pie"
    ER = "ER"
    MINDMAP = "Mindmap"


class Template(BaseModel):
    name: str
    type: DiagramType
    description: str
    code: str


INITIAL_CODE = """graph TD
    A[Start] --> B{Is it working?}
    B -- Yes --> C[Great!]
    B -- No --> D[Debug]
    D --> B"""

NEW_DOCUMENT_CODE = "graph TD\n    A[Start] --> B[End]"

TEMPLATES: List[Template] = [
    Template(
        name="Simple Flowchart",
        type=DiagramType.FLOWCHART,
        description="Basic process flow",
        code="""graph TD
    A[Start] --> B{Decision}
    B -- Yes --> C[Process 1]
    B -- No --> D[Process 2]
    C --> E[End]
    D --> E""",
    ),
    Template(
        name="Sequence Diagram",
        type=DiagramType.SEQUENCE,
        description="Interaction between components",
        code="""sequenceDiagram
    participant Alice
    participant Bob
    Alice->>Bob: Hello Bob, how are you?
    Bob-->>Alice: I am good thanks!
    Bob->>John: How about you John?
    John-->>Alice: I am good too!""",
    ),
    Template(
        name="Gantt Chart",
        type=DiagramType.GANTT,
        description="Project timeline",
        code="""gantt
    title A Gantt Diagram
    dateFormat  YYYY-MM-DD
    section Section
    A task           :a1, 2014-01-01, 30d
    Another task     :after a1  , 20d
    section Another
    Task in sec      :2014-01-12  , 12d
    another task      : 24d""",
    ),
    Template(
        name="Class Diagram",
        type=DiagramType.CLASS,
        description="Object-oriented structure",
        code="""classDiagram
    Animal <|-- Duck
    Animal <|-- Fish
    Animal <|-- Zebra
    class Animal{
      +int age
      +String gender
      +isMammal()
      +mate()
    }
    class Duck{
      +String beakColor
      +swim()
      +quack()
    }""",
    ),
    Template(
        name="State Diagram",
        type=DiagramType.STATE,
        description="State machine transitions",
        code="""stateDiagram-v2
    [*] --> Still
    Still --> [*]
    Still --> Moving
    Moving --> Still
    Moving --> Crash
    Crash --> [*]""",
    ),
]


def find_template(name: str) -> Template | None:
    lowered = name.strip().lower()
    for template in TEMPLATES:
        if template.name.lower() == lowered:
            return template
    return None
