import json
from pathlib import Path

from state_reset.models.mutation_result import MutationResult
from state_reset.models.node import NodeDeclaration
from state_reset.models.request import MutationRequest
from state_reset.models.state_snapshot import StateSnapshot


OUTPUT_DIR = Path("docs/schemas")


MODELS = {
    "node.schema.json": NodeDeclaration,
    "mutation_request.schema.json": MutationRequest,
    "mutation_result.schema.json": MutationResult,
    "state_snapshot.schema.json": StateSnapshot,
}


def main() -> None:
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    for filename, model in MODELS.items():
        schema = model.model_json_schema()
        (OUTPUT_DIR / filename).write_text(
            json.dumps(schema, indent=2),
            encoding="utf-8",
        )


if __name__ == "__main__":
    main()
