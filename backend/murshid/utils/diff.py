"""
Structural diff for edit history.

compute_diff(old, new) describes how to turn `old` into `new`:

- dicts:   {'type': 'object', 'added': {...}, 'removed': {...}, 'modified': {key: diff}}
- strings: short values are replaced whole; values of TEXT_DIFF_THRESHOLD
           characters or more get a word-level diff built with difflib
- lists:   items that are dicts with an 'id' are matched by id, anything
           else by value hash; both keep the removed and inserted segments
- other:   {'type': 'replace', 'old': ..., 'new': ...}

Every diff keeps both sides of each change, so reverse_diff() can walk history
backwards as well as apply_diff() forwards. Diffs are JSON-serialisable.
"""
import copy
import difflib
import hashlib
import json
import re

TEXT_DIFF_THRESHOLD = 60

_TOKEN_RE = re.compile(r'\s+|[^\s]+')


def _value_hash(value):
    encoded = json.dumps(value, sort_keys=True, ensure_ascii=False, default=str)
    return hashlib.sha1(encoded.encode('utf-8')).hexdigest()


def _is_identified_list(value):
    return bool(value) and all(isinstance(item, dict) and 'id' in item for item in value)


def _sequence_ops(old_items, new_items, old_keys, new_keys):
    """difflib opcodes over keys, keeping the real items for changed segments."""
    matcher = difflib.SequenceMatcher(None, old_keys, new_keys, autojunk=False)
    ops = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == 'equal':
            ops.append({'op': 'equal', 'length': i2 - i1})
        else:
            ops.append({'op': tag, 'old': old_items[i1:i2], 'new': new_items[j1:j2]})
    return ops


def _replay(items, ops):
    """Rebuild a sequence (list or str) from its base and a list of ops."""
    parts = []
    cursor = 0
    for op in ops:
        if op['op'] == 'equal':
            parts.append(items[cursor:cursor + op['length']])
            cursor += op['length']
        else:
            parts.append(op['new'])
            cursor += len(op['old'])
    if isinstance(items, str):
        return ''.join(parts)
    return [item for part in parts for item in part]


def _reverse_ops(ops):
    reversed_ops = []
    for op in ops:
        if op['op'] == 'equal':
            reversed_ops.append(dict(op))
            continue
        tag = {'insert': 'delete', 'delete': 'insert'}.get(op['op'], op['op'])
        reversed_ops.append({'op': tag, 'old': op['new'], 'new': op['old']})
    return reversed_ops


# --- per-type diff builders ---

def _diff_text(old, new):
    # Tokens are words and whitespace runs; equal runs are stored as character counts
    old_tokens = _TOKEN_RE.findall(old)
    new_tokens = _TOKEN_RE.findall(new)
    matcher = difflib.SequenceMatcher(None, old_tokens, new_tokens, autojunk=False)
    ops = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        old_segment = ''.join(old_tokens[i1:i2])
        if tag == 'equal':
            ops.append({'op': 'equal', 'length': len(old_segment)})
        else:
            ops.append({'op': tag, 'old': old_segment, 'new': ''.join(new_tokens[j1:j2])})
    return {'type': 'text', 'ops': ops}


def _diff_object(old, new):
    added = {k: copy.deepcopy(v) for k, v in new.items() if k not in old}
    removed = {k: copy.deepcopy(v) for k, v in old.items() if k not in new}
    modified = {}
    for key in old:
        if key in new:
            sub = compute_diff(old[key], new[key])
            if sub is not None:
                modified[key] = sub
    return {'type': 'object', 'added': added, 'removed': removed, 'modified': modified}


def _diff_identified_list(old, new):
    old_ids = [item['id'] for item in old]
    new_ids = [item['id'] for item in new]
    matcher = difflib.SequenceMatcher(None, old_ids, new_ids, autojunk=False)
    ops = []
    modified = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag != 'equal':
            ops.append({'op': tag, 'old': copy.deepcopy(old[i1:i2]), 'new': copy.deepcopy(new[j1:j2])})
            continue
        ops.append({'op': 'equal', 'length': i2 - i1})
        # Same id in place: only the item's own fields may have changed
        for previous, current in zip(old[i1:i2], new[j1:j2]):
            sub = compute_diff(previous, current)
            if sub is not None:
                modified.append([current['id'], sub])
    return {'type': 'array_by_id', 'ops': ops, 'modified': modified}


def _diff_value_list(old, new):
    old_keys = [_value_hash(item) for item in old]
    new_keys = [_value_hash(item) for item in new]
    ops = _sequence_ops(copy.deepcopy(old), copy.deepcopy(new), old_keys, new_keys)
    old_set, new_set = set(old_keys), set(new_keys)
    return {
        'type': 'array',
        'ops': ops,
        'added': [copy.deepcopy(item) for item, key in zip(new, new_keys) if key not in old_set],
        'removed': [copy.deepcopy(item) for item, key in zip(old, old_keys) if key not in new_set],
    }


def compute_diff(old, new):
    """Diff turning old into new, or None when they are identical."""
    if old == new and type(old) is type(new):
        return None
    if isinstance(old, dict) and isinstance(new, dict):
        return _diff_object(old, new)
    if isinstance(old, str) and isinstance(new, str):
        if max(len(old), len(new)) >= TEXT_DIFF_THRESHOLD:
            return _diff_text(old, new)
    if isinstance(old, list) and isinstance(new, list):
        if _is_identified_list(old) and _is_identified_list(new):
            return _diff_identified_list(old, new)
        return _diff_value_list(old, new)
    return {'type': 'replace', 'old': copy.deepcopy(old), 'new': copy.deepcopy(new)}


def apply_diff(value, diff):
    """Patch value forward with a diff produced by compute_diff."""
    if diff is None:
        return copy.deepcopy(value)
    kind = diff['type']
    if kind == 'replace':
        return copy.deepcopy(diff['new'])
    if kind == 'object':
        result = {k: copy.deepcopy(v) for k, v in (value or {}).items() if k not in diff['removed']}
        for key, sub in diff['modified'].items():
            result[key] = apply_diff(result.get(key), sub)
        for key, added in diff['added'].items():
            result[key] = copy.deepcopy(added)
        return result
    if kind == 'text':
        return _replay(value or '', diff['ops'])
    if kind == 'array':
        return copy.deepcopy(_replay(list(value or []), diff['ops']))
    if kind == 'array_by_id':
        result = copy.deepcopy(_replay(list(value or []), diff['ops']))
        modified = {item_id: sub for item_id, sub in diff['modified']}
        return [apply_diff(item, modified[item['id']]) if item['id'] in modified else item
                for item in result]
    raise ValueError(f'unknown diff type {kind!r}')


def reverse_diff(diff):
    """Diff that undoes `diff` (new -> old)."""
    if diff is None:
        return None
    kind = diff['type']
    if kind == 'replace':
        return {'type': 'replace', 'old': copy.deepcopy(diff['new']), 'new': copy.deepcopy(diff['old'])}
    if kind == 'object':
        return {
            'type': 'object',
            'added': copy.deepcopy(diff['removed']),
            'removed': copy.deepcopy(diff['added']),
            'modified': {k: reverse_diff(sub) for k, sub in diff['modified'].items()},
        }
    if kind == 'text':
        return {'type': 'text', 'ops': _reverse_ops(diff['ops'])}
    if kind == 'array':
        return {
            'type': 'array',
            'ops': _reverse_ops(diff['ops']),
            'added': copy.deepcopy(diff['removed']),
            'removed': copy.deepcopy(diff['added']),
        }
    if kind == 'array_by_id':
        return {
            'type': 'array_by_id',
            'ops': _reverse_ops(diff['ops']),
            'modified': [[item_id, reverse_diff(sub)] for item_id, sub in diff['modified']],
        }
    raise ValueError(f'unknown diff type {kind!r}')
