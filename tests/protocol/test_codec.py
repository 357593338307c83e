import json

import pytest
import wmipc

from wmipc.protocol import codec
from wmipc.protocol import fields
from wmipc.protocol import wire


def encode(value):
    return json.dumps(value).encode('utf-8')


def test_encode_command():

    assert codec.encode_command('exit') == b'exit'
    assert codec.encode_command('') == b''
    assert codec.encode_command('rename workspace to é') == 'rename workspace to é'.encode('utf-8')

    with pytest.raises(TypeError):
        codec.encode_command(b'exit')


def test_encode_subscribe():

    encoded = codec.encode_subscribe(['window', 'workspace'])
    assert json.loads(encoded) == ['window', 'workspace']

    encoded = codec.encode_subscribe([fields.BINDING, 'tick'])
    assert json.loads(encoded) == ['binding', 'tick']

    assert json.loads(codec.encode_subscribe([])) == []

    with pytest.raises(ValueError):
        codec.encode_subscribe([99])


def test_encode_sync():

    decoded = json.loads(codec.encode_sync(8388613, 42))
    assert decoded == {'window': 8388613, 'rnd': 42}


def test_command_result():

    results = codec.decode_reply(fields.COMMAND, b'[{"success": true}]')

    assert len(results) == 1
    assert isinstance(results[0], wmipc.CommandResult)
    assert results[0].success == True
    assert results[0].error is None
    assert results[0].parse_error == False

    payload = encode([
        {'success': True},
        {'success': False, 'parse_error': True, 'error': 'Expected one of these tokens: <end>'},
    ])

    results = codec.decode_reply(fields.COMMAND, payload)
    assert [result.success for result in results] == [True, False]
    assert results[1].parse_error == True
    assert results[1].error.startswith('Expected')


def test_workspaces():

    payload = encode([
        {'num': 1, 'name': '1', 'visible': True, 'focused': True, 'urgent': False,
         'rect': {'x': 0, 'y': 0, 'width': 1280, 'height': 800}, 'output': 'LVDS1'},
        {'num': -1, 'name': 'mail', 'visible': False, 'focused': False, 'urgent': True,
         'rect': {'x': 0, 'y': 0, 'width': 1280, 'height': 800}, 'output': 'LVDS1',
         'id': 94065291460176},
    ])

    workspaces = codec.decode_reply(fields.GET_WORKSPACES, payload)

    assert [workspace.name for workspace in workspaces] == ['1', 'mail']
    assert workspaces[0].rect == wmipc.Rect(0, 0, 1280, 800)
    assert workspaces[1].urgent == True

    # Keys the record does not know about are still reachable.

    assert workspaces[1].raw['id'] == 94065291460176


def test_outputs():

    payload = encode([
        {'name': 'LVDS1', 'active': True, 'primary': True, 'current_workspace': '1',
         'rect': {'x': 0, 'y': 0, 'width': 1280, 'height': 800}},
        {'name': 'VGA1', 'active': False, 'primary': False, 'current_workspace': None,
         'rect': {'x': 0, 'y': 0, 'width': 0, 'height': 0}},
    ])

    outputs = codec.decode_reply(fields.GET_OUTPUTS, payload)

    assert outputs[0].current_workspace == '1'
    assert outputs[1].current_workspace is None
    assert outputs[1].active == False


def test_tree(tree_json):

    root = codec.decode_reply(fields.GET_TREE, encode(tree_json))
    assert isinstance(root, wmipc.TreeNode)
    assert root.id == wmipc.NodeId(6875648)


def test_marks():

    assert codec.decode_reply(fields.GET_MARKS, b'[]') == []
    assert codec.decode_reply(fields.GET_MARKS, b'["main", "irc"]') == ['main', 'irc']

    with pytest.raises(wmipc.MalformedPayload):
        codec.decode_reply(fields.GET_MARKS, b'[1, 2]')


def test_bar_config():

    ids = codec.decode_reply(fields.GET_BAR_CONFIG, b'["bar-0", "bar-1"]', codec.BAR_IDS)
    assert ids == ['bar-0', 'bar-1']

    payload = encode({
        'id': 'bar-0',
        'mode': 'dock',
        'position': 'bottom',
        'status_command': 'i3status',
        'font': '-misc-fixed-medium-r-normal--13-120-75-75-C-70-iso10646-1',
        'workspace_buttons': True,
        'binding_mode_indicator': True,
        'verbose': False,
        'colors': {'background': '#c0c0c0', 'statusline': '#00ff00'},
    })

    bar = codec.decode_reply(fields.GET_BAR_CONFIG, payload, codec.BAR_CONFIG)
    assert isinstance(bar, wmipc.BarConfig)
    assert bar.position == 'bottom'
    assert bar.colors['statusline'] == '#00ff00'
    assert bar.tray_output is None

    # The explicit variant wins over the payload shape.

    with pytest.raises(wmipc.MalformedPayload):
        codec.decode_reply(fields.GET_BAR_CONFIG, payload, codec.BAR_IDS)

    with pytest.raises(wmipc.MalformedPayload):
        codec.decode_reply(fields.GET_BAR_CONFIG, b'[]', codec.BAR_CONFIG)

    # Without a variant the shape decides.

    assert codec.decode_reply(fields.GET_BAR_CONFIG, b'["bar-0"]') == ['bar-0']
    assert codec.decode_reply(fields.GET_BAR_CONFIG, payload).id == 'bar-0'


def test_version():

    payload = encode({
        'major': 4,
        'minor': 23,
        'patch': 0,
        'human_readable': '4.23 (2023-10-29)',
        'loaded_config_file_name': '/home/user/.config/i3/config',
    })

    version = codec.decode_reply(fields.GET_VERSION, payload)

    assert isinstance(version, wmipc.VersionInfo)
    assert (version.major, version.minor, version.patch) == (4, 23, 0)
    assert version.loaded_config_file_name.endswith('config')


def test_supplementary_replies():

    modes = codec.decode_reply(fields.GET_BINDING_MODES, b'["default", "resize"]')
    assert modes == ['default', 'resize']

    reply = codec.decode_reply(fields.GET_CONFIG, b'{"config": "bindsym Mod4+q kill\\n"}')
    assert reply.config == 'bindsym Mod4+q kill\n'

    for code in (fields.SUBSCRIBE, fields.SEND_TICK, fields.SYNC):
        reply = codec.decode_reply(code, b'{"success": true}')
        assert isinstance(reply, wmipc.Success)
        assert reply.success == True


def test_unrecognized_reply():

    reply = codec.decode_reply(99, b'{"whatever": [1, 2]}')

    assert isinstance(reply, wmipc.Unrecognized)
    assert reply.kind == 'reply'
    assert reply.code == 99
    assert reply.data == {'whatever': [1, 2]}


def test_malformed_reply():

    for payload in (b'', b'[{"success": tru', b'\xff\xfe', b'not json'):
        with pytest.raises(wmipc.MalformedPayload) as caught:
            codec.decode_reply(fields.COMMAND, payload)

        assert caught.value.code == fields.COMMAND
        assert caught.value.payload == payload

    # Valid JSON of the wrong shape is just as malformed.

    with pytest.raises(wmipc.MalformedPayload) as caught:
        codec.decode_reply(fields.GET_VERSION, b'[]')

    assert caught.value.payload == b'[]'

    with pytest.raises(wmipc.MalformedPayload):
        codec.decode_reply(fields.COMMAND, b'{"success": true}')

    with pytest.raises(wmipc.MalformedPayload):
        codec.decode_reply(fields.GET_TREE, b'[]')

    # MalformedPayload is also a ValueError.

    with pytest.raises(ValueError):
        codec.decode_reply(fields.GET_TREE, b'')


def test_events(tree_json):

    window = tree_json['nodes'][0]['nodes'][1]['nodes'][0]['nodes'][0]
    workspace = tree_json['nodes'][0]['nodes'][1]['nodes'][0]

    event = codec.decode_event(fields.WORKSPACE, encode({'change': 'focus', 'current': workspace, 'old': None}))
    assert isinstance(event, wmipc.WorkspaceEvent)
    assert event.change == 'focus'
    assert event.current.name == '1'
    assert event.old is None

    event = codec.decode_event(fields.OUTPUT, b'{"change": "unspecified"}')
    assert isinstance(event, wmipc.OutputEvent)
    assert event.change == 'unspecified'

    event = codec.decode_event(fields.MODE, b'{"change": "resize", "pango_markup": false}')
    assert isinstance(event, wmipc.ModeEvent)
    assert event.change == 'resize'
    assert event.pango_markup == False

    event = codec.decode_event(fields.WINDOW, encode({'change': 'new', 'container': window}))
    assert isinstance(event, wmipc.WindowEvent)
    assert event.container.window == 8388613

    event = codec.decode_event(fields.BARCONFIG_UPDATE, b'{"id": "bar-0", "hidden_state": "hide", "mode": "hide"}')
    assert isinstance(event, wmipc.BarconfigUpdateEvent)
    assert event.mode == 'hide'
    assert event.raw['hidden_state'] == 'hide'

    payload = encode({
        'change': 'run',
        'binding': {
            'command': 'nop',
            'event_state_mask': ['shift', 'ctrl'],
            'input_code': 0,
            'symbol': 't',
            'input_type': 'keyboard',
        },
    })

    event = codec.decode_event(fields.BINDING, payload)
    assert isinstance(event, wmipc.BindingEvent)
    assert event.binding.command == 'nop'
    assert event.binding.event_state_mask == ['shift', 'ctrl']

    event = codec.decode_event(fields.SHUTDOWN, b'{"change": "restart"}')
    assert isinstance(event, wmipc.ShutdownEvent)
    assert event.change == 'restart'

    event = codec.decode_event(fields.TICK, b'{"first": false, "payload": "hello"}')
    assert isinstance(event, wmipc.TickEvent)
    assert event.payload == 'hello'


def test_unrecognized_event():

    event = codec.decode_event(42, b'{"change": "something new"}')

    assert isinstance(event, wmipc.Unrecognized)
    assert event.kind == 'event'
    assert event.data['change'] == 'something new'

    with pytest.raises(wmipc.MalformedPayload):
        codec.decode_event(42, b'{')


def test_decode_frame():

    frame, consumed = wire.unpack_frame(wire.pack_event(fields.MODE, b'{"change": "default"}'))
    message = codec.decode_frame(frame)

    assert message.is_event
    assert message.code == fields.MODE
    assert message.name == 'mode'
    assert message.payload.change == 'default'

    frame, consumed = wire.unpack_frame(wire.pack_frame(fields.GET_MARKS, b'[]'))
    message = codec.decode_frame(frame)

    assert message.is_event == False
    assert message.name == 'GET_MARKS'
    assert message.payload == []


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
