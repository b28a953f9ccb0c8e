import argparse
import json
import logging
import sys

from .action_selector import FitnessProportionateSelector, ModelBasedSelector
from .config import STRATEGIES, ExplorerConfig
from .errors import ConfigError, EmptyCandidateSet
from .event_probability import load_classifier
from .knowledge import ActionCounter, ExplorationContext, load_state
from .schema import load_schema
from .type_resolver import TypeResolver, load_vocabulary

logging.basicConfig(level=logging.INFO)


def main(argv=None) -> int:
    try:
        cfg = ExplorerConfig.from_env()
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    parser = argparse.ArgumentParser(description="Choose the next action for a UI state snapshot")
    parser.add_argument("state", help="UI state snapshot (JSON)")
    parser.add_argument("--model", default=cfg.model_path, help="joblib-serialized classifier")
    parser.add_argument("--schema", default=cfg.schema_path, help="ARFF file the model was trained on")
    parser.add_argument("--vocabulary", default=cfg.vocabulary_path, help="Widget type vocabulary, one per line")
    parser.add_argument("--seed", type=int, default=cfg.random_seed, help="Random seed of the selector")
    parser.add_argument("--trials", type=int, default=cfg.trials, help="Roulette draws per decision")
    parser.add_argument("--strategy", choices=STRATEGIES, default=cfg.strategy, help="Selection strategy")
    parser.add_argument("--counts", help="JSON object mapping element id -> previous action count")
    parser.add_argument("--probabilities", action="store_true", help="Print the probability of every element")
    args = parser.parse_args(argv)

    classifier = load_classifier(args.model)
    schema = load_schema(args.schema)
    resolver = TypeResolver(load_vocabulary(args.vocabulary)) if args.vocabulary else None
    state = load_state(args.state)

    context = ExplorationContext()
    if args.counts:
        with open(args.counts, "r", encoding="utf-8") as fh:
            context.add_watcher(ActionCounter({str(k): int(v) for k, v in json.load(fh).items()}))

    if args.strategy == "model":
        selector = ModelBasedSelector(context, classifier, schema, args.seed, resolver)
    else:
        selector = FitnessProportionateSelector(
            context,
            classifier,
            schema,
            args.seed,
            resolver,
            use_class_membership_probability=cfg.use_class_membership_probability,
            trials=args.trials,
        )
    context.notify_interaction(None, state)

    try:
        if args.probabilities:
            for elem, p in selector.model.get_probabilities(state).items():
                print(f"{elem.element_id}\t{elem.type_label}\t{p:.4f}")
        action = selector.choose_action(state)
    except EmptyCandidateSet as e:
        print(f"No action chosen: {e}", file=sys.stderr)
        return 1

    print(f"{action.action_type.value} {action.target.element_id} ({action.target.type_label})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
