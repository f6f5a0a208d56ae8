# toggle

Building blocks for a feature flag backend. Flags belong to projects,
projects belong to tenants, and every read or write of a flag is constrained
to the tenant that asks for it. Flags carry targeting rules and a rollout
percentage, and SDK clients evaluate them for a user through a small JSON API
served by Flask views.

## Installing

```
pip install .
pip install ".[test]"   # adds pytest
```

## Modules

- **`toggle.config`** – `load_config(environ=None)` builds a frozen `Config`
  (`router`, `backend`, `database`, `auth0`) from a mapping. Without a
  mapping it loads `.env` from the working directory (variables already set
  win) and reads `os.environ`. Missing variables become empty strings;
  `auth0.skip_auth` is `True` only when `SKIP_AUTH` is exactly `true`.
- **`toggle.flag_model`** – the `Flag` and `Rule` dataclasses, with
  `to_dict()` / `from_dict()` for their JSON form (timestamps as ISO 8601).
- **`toggle.flag_repository`** – `FlagRepository(db)` stores flags through a
  DB-API connection using `?` placeholders, in tables `flags` and `projects`.
  Every lookup, update and delete joins on the project's `tenant_id`; a flag
  that is missing or belongs to another tenant raises `NoRowsError`.
  `create` fills in a new UUID and UTC timestamps. Lists are newest first.
- **`toggle.flag_service`** – `FlagService(repo, validator, logger=...)`
  validates flags (a name is required, `InvalidFlagDataError` otherwise),
  checks project ownership before creating or updating (raising
  `ProjectNotInTenantError`), turns `NoRowsError` into `NotFoundError` and
  wraps other storage errors in `ToggleError("failed to ...: ...")`.
  `CreateRequest.from_json` and `UpdateRequest.from_json` parse request
  bodies and raise `InvalidInputError` on bad input.
- **`toggle.flag_handler`** – `FlagHandler(service).register_routes(app)`
  adds these routes to a Flask app or blueprint, all scoped to the tenant of
  the current request context:

  | Method | Path                 | Action                            |
  |--------|----------------------|-----------------------------------|
  | POST   | `/flags`             | create a flag (disabled, `AND` if no `rule_logic`) → 201 |
  | GET    | `/flags`             | list the tenant's flags           |
  | GET    | `/flags/<id>`        | fetch one flag                    |
  | PUT    | `/flags/<id>`        | update only the fields given      |
  | PATCH  | `/flags/<id>/toggle` | flip the enabled state            |
  | DELETE | `/flags/<id>`        | remove a flag → 204               |

  Errors are returned as `{"error": "..."}`: 400 for invalid bodies or flag
  data, 404 for anything `is_not_found_error` recognises (another tenant's
  flag looks exactly like a missing one), 500 otherwise.

- **`toggle.evaluator`** – `Evaluator().evaluate(flag, ctx)` decides whether
  a flag is on for a user and never raises on bad rules:
  - a disabled flag is off; an enabled flag with no rules is on;
  - rules are combined with `AND` when `rule_logic == "AND"`, otherwise with
    `OR`;
  - operators are `equals`, `not_equals`, `in`, `not_in`, `greater_than` and
    `less_than`; equality compares the values' text forms, the numeric
    operators accept only ints and floats; a missing attribute or an unknown
    operator never matches;
  - when the rules pass, the user is in if
    `consistent_hash(user_id, flag.id)` (a stable bucket 0–100 from SHA-256)
    is at most the first rule's `rollout`.
- **`toggle.evaluation_types`** – `EvaluationContext`, `EvaluationRequest`,
  `SingleEvaluationRequest` (`from_json`, `user_id` required) and
  `EvaluationResponse`, `SingleEvaluationResponse` (`to_dict`).
- **`toggle.evaluation_service`** – `EvaluationService(flag_repo, logger=None)`
  with `evaluate_all(project_id, tenant_id, ctx)` and
  `evaluate_single(flag_id, tenant_id, ctx)`.
- **`toggle.evaluation_handler`** – `EvaluationHandler(service)` serves
  `POST /evaluate` (all flags of the SDK's project; 500 on failure) and
  `POST /flags/<id>/evaluate` (404 on failure).
- **`toggle.middleware`** – `before_request` hooks for Flask:
  `api_key_middleware(project_repo, logger)` reads `Authorization: Bearer ...`,
  looks the key up with `project_repo.get_by_api_key(key)` and binds the
  project and tenant (401 for a missing header, wrong format or unknown key,
  500 on lookup errors). `tenant_middleware(tenant_repo, logger)` needs a user
  in the context, reads `X-Tenant-ID`, asks
  `tenant_repo.get_membership(user_id, tenant_id)` for a role and switches the
  context to that tenant and role (400 without the header, 403 with no role,
  500 on lookup errors).
- **`toggle.request_logging`** – `install_request_logger(app, logger)` logs
  method, path, status and duration of every request, also as record
  attributes.
- **`toggle.context`** – the immutable `RequestContext` (`with_tenant`,
  `with_auth`, `with_sdk_auth`, `require_tenant_id`, `require_user_id`,
  `require_project_id`, the latter raising `MissingContextError`),
  `current_request_context()` and `bind_request_context(ctx)`, usable as a
  `with` block.
- **`toggle.transaction`** – `UnitOfWork(db).run_in_transaction(fn)` binds the
  connection as the current transaction, commits when `fn` returns and rolls
  back when it raises; a failed commit raises `TransactionError`. While a
  transaction is bound, `FlagRepository` leaves committing to it.
- **`toggle.validator`** – `TenantValidator(db)` with
  `validate_project_ownership` and `validate_tenant_exists`.
- **`toggle.errors`** – `ToggleError` and its subclasses, plus
  `is_not_found_error(err)`, which also follows `__cause__` chains.
- **`toggle.slugs`** – `generate(text)` and `with_fallback(text)`, which adds
  an eight-character random suffix.

## Evaluating a flag

```python
from toggle.evaluator import Evaluator
from toggle.evaluation_types import EvaluationContext
from toggle.flag_model import Flag, Rule

flag = Flag(
    id="checkout-v2",
    name="checkout-v2",
    enabled=True,
    rule_logic="AND",
    rules=[Rule(attribute="country", operator="in", value=["AU", "US"], rollout=50)],
)

ctx = EvaluationContext(user_id="user-42", attributes={"country": "AU"})

Evaluator().evaluate(flag, ctx)  # the same answer every time for this user
```

## SDK requests

```http
POST /evaluate
Authorization: Bearer token
Content-Type: application/json

{"context": {"user_id": "user-42", "attributes": {"country": "AU"}}}
```

The response maps each flag identifier to its state:

```json
{"flags": {"checkout-v2": true}}
```

## Environment read by `load_config`

| Variable            | Field                   |
|---------------------|-------------------------|
| `GIN_MODE`          | `router.mode`           |
| `BACKEND_PORT`      | `backend.port`          |
| `POSTGRES_USER`     | `database.user`         |
| `POSTGRES_NAME`     | `database.name`         |
| `POSTGRES_PASSWORD` | `database.password`     |
| `POSTGRES_HOST`     | `database.host`         |
| `POSTGRES_PORT`     | `database.port`         |
| `POSTGRES_SSL_MODE` | `database.ssl_mode`     |
| `AUTH0_DOMAIN`      | `auth0.domain`          |
| `AUTH0_AUDIENCE`    | `auth0.audience`        |
| `SKIP_AUTH`         | `auth0.skip_auth`       |

## What the package does not do

- It has no command and no server entry point: nothing creates the Flask
  application, opens the database connection from `Config`, or starts
  listening on `backend.port`. You assemble the app from the handlers and
  hooks above.
- It does not create the database schema; the `flags` and `projects` tables
  must already exist.
- It has no user authentication. The `auth0` settings are only read; nothing
  validates tokens or sets the user in the request context, so
  `tenant_middleware` needs a hook of your own that does.
- It has no project, tenant or user storage. `api_key_middleware` and
  `tenant_middleware` take repositories you supply, with `get_by_api_key` and
  `get_membership` methods respectively.