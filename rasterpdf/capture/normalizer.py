"""
Constraint normalizer

Fixed heights, max-height and scrolling/hidden overflow on the target or anything around it
clip what Chromium paints, so before measuring and capturing we override those inline styles
and put every one of them back afterwards.

    async with normalized_constraints(page, element):
        ... measure and capture ...

The browser side only collects and applies styles (see res/collect_constraints.js and
res/apply_styles.js); deciding what to override happens here so it can be tested without a browser.
"""
from contextlib import asynccontextmanager

from loguru import logger

from rasterpdf.capture import COLLECT_CONSTRAINTS_JS, APPLY_STYLES_JS

CLIPPING_OVERFLOW = ('hidden', 'auto', 'scroll')
OVERFLOW_PROPS = ('overflow', 'overflow-x', 'overflow-y')

# Known limitation: positioned wrappers are made static only when they also clip, anything
# more exotic (clip-path, contain, transforms) is left alone
CLIPPING_POSITIONS = ('relative', 'absolute')

UNCONSTRAINED = {
    'max-height': 'none',
    'height': 'auto',
    'overflow': 'visible',
    'overflow-x': 'visible',
    'overflow-y': 'visible',
}


def _has_max_height(computed):
    return (computed.get('max-height') or 'none') != 'none'


def is_clipping(computed):
    return _has_max_height(computed) or any(computed.get(p) in CLIPPING_OVERFLOW for p in OVERFLOW_PROPS)


def plan_constraint_overrides(snapshot):
    """
    Work out which inline styles to override for a collected snapshot.

    :param snapshot: list of {node_id, relation ('self'|'descendant'|'ancestor'), computed, inline}
    :return: list of {node_id, relation, styles, original} where `original` holds the inline
             value of every property in `styles` before it was touched ('' when it was unset)
    """
    records = []
    for node in snapshot:
        computed = node.get('computed') or {}
        inline = node.get('inline') or {}
        relation = node.get('relation')
        styles = {}

        if relation == 'self':
            styles.update(UNCONSTRAINED)
            styles['max-width'] = 'none'
            # Keep the laid-out width once max-width is gone
            if not inline.get('width') and computed.get('width') and computed['width'] != 'auto':
                styles['width'] = computed['width']

        elif relation == 'ancestor':
            if not is_clipping(computed):
                continue
            styles.update(UNCONSTRAINED)
            if computed.get('position') in CLIPPING_POSITIONS:
                styles['position'] = 'static'

        else:
            if _has_max_height(computed):
                styles['max-height'] = 'none'
            for prop in OVERFLOW_PROPS:
                if computed.get(prop) in CLIPPING_OVERFLOW:
                    styles[prop] = 'visible'
            if not styles:
                continue

        records.append({
            'node_id': node['node_id'],
            'relation': relation,
            'styles': styles,
            'original': {prop: inline.get(prop) or '' for prop in styles},
        })

    return records


async def apply_constraint_overrides(page, records):
    return await page.evaluate(APPLY_STYLES_JS, {
        'records': [{'node_id': r['node_id'], 'styles': r['styles']} for r in records],
        'release': False,
    })


async def restore_constraints(page, records):
    """Put back the original inline values and drop the temporary node tags."""
    restored = await page.evaluate(APPLY_STYLES_JS, {
        'records': [{'node_id': r['node_id'], 'styles': r['original']} for r in records],
        'release': True,
    })
    logger.debug(f"Restored original styles on {restored} element(s)")
    return restored


@asynccontextmanager
async def normalized_constraints(page, element):
    snapshot = await element.evaluate(COLLECT_CONSTRAINTS_JS)
    records = plan_constraint_overrides(snapshot)

    ancestors = sum(1 for r in records if r['relation'] == 'ancestor')
    logger.debug(f"Removing height/overflow constraints from {len(records)} of {len(snapshot)} element(s), {ancestors} ancestor(s)")

    try:
        await apply_constraint_overrides(page, records)
        yield records
    finally:
        await restore_constraints(page, records)
