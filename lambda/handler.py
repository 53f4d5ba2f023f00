import os
import re
import json
import uuid
import logging
from decimal import Decimal, DecimalException

import boto3
from botocore.exceptions import ClientError


def _log_level(name):
    level = logging.getLevelName(str(name).strip().upper())
    return level if isinstance(level, int) else logging.INFO


logger = logging.getLogger()
logger.setLevel(_log_level(os.environ.get('LOG_LEVEL', 'INFO')))

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET, POST, DELETE, PATCH',
    'Access-Control-Allow-Headers': '*',
}

ITEM_PATH = re.compile(r'^/(?:items/)?(?P<id>[^/]+)/?$')

_table = None


class BadRequest(Exception):
    pass


def _env(name):
    value = os.environ.get(name)
    if not value:
        raise RuntimeError(f'{name} must be set')
    return value


def get_table():
    global _table
    if _table is None:
        _table = boto3.resource('dynamodb').Table(_env('TABLE_NAME'))
    return _table


def _default(value):
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, set):
        return sorted(value)
    raise TypeError(f'{type(value).__name__} is not JSON serializable')


def respond(status, body=None):
    return {
        'statusCode': status,
        'headers': {'Content-Type': 'application/json', **CORS_HEADERS},
        'body': '' if body is None else json.dumps(body, default=_default),
    }


def _reject_constant(name):
    raise BadRequest(f'{name} is not a valid number')


def _json_object(event):
    raw = event.get('body')
    if not raw:
        raise BadRequest('body is required')
    try:
        body = json.loads(raw, parse_float=Decimal, parse_constant=_reject_constant)
    except ValueError:
        raise BadRequest('body must be valid JSON')
    if not isinstance(body, dict):
        raise BadRequest('body must be an object')
    return body


def _write(method, **kwargs):
    # numbers DynamoDB cannot store fail client-side, before any request
    try:
        return method(**kwargs)
    except (DecimalException, TypeError) as e:
        raise BadRequest(f'unsupported value: {e.__class__.__name__}')


def get_all(event):
    table = get_table()
    response = table.scan()
    items = response.get('Items', [])
    while 'LastEvaluatedKey' in response:
        response = table.scan(ExclusiveStartKey=response['LastEvaluatedKey'])
        items.extend(response.get('Items', []))
    return respond(200, items)


def create(event):
    item = _json_object(event)
    item[_env('PK')] = str(uuid.uuid4())
    _write(get_table().put_item, Item=item)
    return respond(200, item)


def get_one(event, item_id):
    item = get_table().get_item(Key={_env('PK'): item_id}).get('Item')
    if item is None:
        return respond(404, {'message': f'item {item_id} not found'})
    return respond(200, item)


def delete_one(event, item_id):
    get_table().delete_item(Key={_env('PK'): item_id})
    return respond(200)


def update_one(event, item_id):
    pk = _env('PK')
    body = _json_object(event)
    if pk in body:
        raise BadRequest(f'{pk} cannot be changed')

    sets, removes, names, values = [], [], {}, {}
    for i, (key, value) in enumerate(body.items()):
        names[f'#a{i}'] = key
        if value is None:
            removes.append(f'#a{i}')
        else:
            sets.append(f'#a{i} = :v{i}')
            values[f':v{i}'] = value

    expression = ' '.join(
        part for part in (
            'SET ' + ', '.join(sets) if sets else '',
            'REMOVE ' + ', '.join(removes) if removes else '',
        ) if part
    )
    if not expression:
        return respond(200)

    kwargs = {
        'Key': {pk: item_id},
        'UpdateExpression': expression,
        'ExpressionAttributeNames': names,
    }
    if values:
        kwargs['ExpressionAttributeValues'] = values
    _write(get_table().update_item, **kwargs)
    return respond(200)


COLLECTION_ROUTES = {'GET': get_all, 'POST': create}
ITEM_ROUTES = {'GET': get_one, 'DELETE': delete_one, 'PATCH': update_one}


def main(event, context):
    method = event.get('httpMethod', 'GET').upper()
    path = event.get('path') or '/'
    logger.info('%s %s', method, path)

    if method == 'OPTIONS':
        return respond(200)

    try:
        if path.rstrip('/') == '/items':
            route = COLLECTION_ROUTES.get(method)
            if route is None:
                return respond(405, {'message': f'{method} not allowed'})
            return route(event)

        match = ITEM_PATH.match(path)
        if match is None:
            return respond(404, {'message': f'no route for {path}'})
        route = ITEM_ROUTES.get(method)
        if route is None:
            return respond(405, {'message': f'{method} not allowed'})
        return route(event, match.group('id'))
    except BadRequest as e:
        return respond(400, {'message': str(e)})
    except ClientError:
        logger.exception('dynamodb request failed')
        return respond(500, {'message': 'internal error'})
