"""
Rules package.

Defines the feature model and the evaluation engine. A feature is
active for a user when any of its gates fires, checked in this order:
global percentage, locale predicates, explicit users, group predicates.

Modules of interest:
- bucketing: CRC-32 based user bucketing.
- codec: The `percentage|users|groups|locales` record format.
- models: Feature and its mutators and activation check.
- predicates: Named group and locale predicates.
- engine: Store-backed read-mutate-write orchestration.
"""
