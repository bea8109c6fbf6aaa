"""
Telnet option negotiation, :rfc:`854`, :rfc:`855`.

Each option is tracked in two directions, whether *we* perform it
(local: ``WONT``, ``WANTNO``, ``WANTYES``, ``WILL``) and whether the
*peer* performs it (remote: ``DONT``, ``WANTNO``, ``WANTYES``, ``DO``),
following the "Q method" of :rfc:`1143`.  The ``WANT*`` states record a
request we sent and have not yet seen answered.  An answer is never
itself answered, which is what prevents negotiation loops.
"""
# std imports
import logging

# local imports
from .telopt import DO, DONT, WILL, WONT, name_command

__all__ = ('OptionState', 'Negotiator', 'LOCAL', 'REMOTE')

#: Directions given to the change callback of :class:`Negotiator`.
LOCAL, REMOTE = 'local', 'remote'

#: Local states, what we do.
(L_WONT, L_WANTNO, L_WANTYES, L_WILL) = ('WONT', 'WANTNO', 'WANTYES', 'WILL')

#: Remote states, what we allow the peer to do.
(R_DONT, R_WANTNO, R_WANTYES, R_DO) = ('DONT', 'WANTNO', 'WANTYES', 'DO')


class OptionState(object):
    """Negotiation state of a single option code in both directions."""

    __slots__ = ('option', 'local', 'remote')

    def __init__(self, option):
        self.option = option
        self.local = L_WONT
        self.remote = R_DONT

    @property
    def local_enabled(self):
        """Whether we perform this option."""
        return self.local == L_WILL

    @property
    def remote_enabled(self):
        """Whether the peer performs this option."""
        return self.remote == R_DO

    def __repr__(self):
        return '<OptionState {0} local={1} remote={2}>'.format(
            name_command(self.option), self.local, self.remote)


class Negotiator(object):
    """
    Option negotiation state machine for one connection.

    :param send_iac: callable ``(cmd, opt)`` that transmits
        ``IAC cmd opt`` to the peer.
    :param supported_local: option bytes we agree to perform when asked
        by ``DO``.
    :param wanted_remote: option bytes we agree to let the peer perform
        when offered by ``WILL``.
    :param on_change: callable ``(direction, opt, enabled)`` fired each
        time an option becomes enabled or disabled in either direction.
    :param logging.Logger log: target logger, if None is given, one is
        created using the namespace ``'telnetlite.negotiation'``.
    """

    def __init__(self, send_iac, supported_local=(), wanted_remote=(),
                 on_change=None, log=None):
        self._send_iac = send_iac
        self.supported_local = frozenset(supported_local)
        self.wanted_remote = frozenset(wanted_remote)
        self.on_change = on_change
        self.log = log or logging.getLogger(__name__)
        self._options = {}

    def __getitem__(self, opt):
        return self._options.get(opt) or OptionState(opt)

    def __iter__(self):
        return iter(self._options.values())

    def _state(self, opt):
        if opt not in self._options:
            self._options[opt] = OptionState(opt)
        return self._options[opt]

    def local_enabled(self, opt):
        """Whether we perform option ``opt``."""
        return self[opt].local_enabled

    def remote_enabled(self, opt):
        """Whether the peer performs option ``opt``."""
        return self[opt].remote_enabled

    @property
    def pending(self):
        """Options with a request of ours not yet answered."""
        return [state for state in self
                if state.local in (L_WANTNO, L_WANTYES)
                or state.remote in (R_WANTNO, R_WANTYES)]

    def _send(self, cmd, opt):
        self.log.debug('send IAC {} {}'.format(
            name_command(cmd), name_command(opt)))
        self._send_iac(cmd, opt)

    def _set_local(self, state, value):
        was_enabled = state.local_enabled
        if value != state.local:
            self.log.debug('local[{}] {} -> {}'.format(
                name_command(state.option), state.local, value))
        state.local = value
        if was_enabled != state.local_enabled and self.on_change:
            self.on_change(LOCAL, state.option, state.local_enabled)

    def _set_remote(self, state, value):
        was_enabled = state.remote_enabled
        if value != state.remote:
            self.log.debug('remote[{}] {} -> {}'.format(
                name_command(state.option), state.remote, value))
        state.remote = value
        if was_enabled != state.remote_enabled and self.on_change:
            self.on_change(REMOTE, state.option, state.remote_enabled)

    def receive(self, cmd, opt):
        """
        Process ``IAC cmd opt`` received from the peer.

        :param bytes cmd: one of ``DO``, ``DONT``, ``WILL``, ``WONT``.
        :param bytes opt: option byte.
        """
        self.log.debug('recv IAC {} {}'.format(
            name_command(cmd), name_command(opt)))
        handler = {DO: self.handle_do,
                   DONT: self.handle_dont,
                   WILL: self.handle_will,
                   WONT: self.handle_wont}.get(cmd)
        if handler is None:
            raise ValueError('Expected DO, DONT, WILL, WONT, got {0}.'
                             .format(name_command(cmd)))
        handler(opt)

    def handle_do(self, opt):
        """Peer asks us to perform ``opt``."""
        state = self._state(opt)
        if state.local == L_WONT:
            if opt in self.supported_local:
                self._send(WILL, opt)
                self._set_local(state, L_WILL)
            else:
                self.log.debug('DO {} not supported.'.format(
                    name_command(opt)))
                self._send(WONT, opt)
        elif state.local == L_WANTYES:
            self._set_local(state, L_WILL)
        elif state.local == L_WANTNO:
            self.log.warning('WONT {0} answered by DO {0}.'.format(
                name_command(opt)))
            self._set_local(state, L_WILL)

    def handle_dont(self, opt):
        """Peer asks us to stop performing ``opt``."""
        state = self._state(opt)
        if state.local == L_WILL:
            self._send(WONT, opt)
            self._set_local(state, L_WONT)
        elif state.local in (L_WANTNO, L_WANTYES):
            self._set_local(state, L_WONT)

    def handle_will(self, opt):
        """Peer offers to perform ``opt``."""
        state = self._state(opt)
        if state.remote == R_DONT:
            if opt in self.wanted_remote:
                self._send(DO, opt)
                self._set_remote(state, R_DO)
            else:
                self.log.debug('WILL {} not wanted.'.format(
                    name_command(opt)))
                self._send(DONT, opt)
        elif state.remote == R_WANTYES:
            self._set_remote(state, R_DO)
        elif state.remote == R_WANTNO:
            self.log.warning('DONT {0} answered by WILL {0}.'.format(
                name_command(opt)))
            self._set_remote(state, R_DO)

    def handle_wont(self, opt):
        """Peer refuses, or stops performing, ``opt``."""
        state = self._state(opt)
        if state.remote == R_DO:
            self._send(DONT, opt)
            self._set_remote(state, R_DONT)
        elif state.remote in (R_WANTNO, R_WANTYES):
            self._set_remote(state, R_DONT)

    # locally initiated negotiation

    def enable_local(self, opt):
        """
        Offer to perform ``opt`` by sending ``WILL``.

        Returns True if the request was sent.
        """
        state = self._state(opt)
        if state.local != L_WONT:
            self.log.debug('skip WILL {}; local = {}'.format(
                name_command(opt), state.local))
            return False
        self._set_local(state, L_WANTYES)
        self._send(WILL, opt)
        return True

    def disable_local(self, opt):
        """
        Stop performing ``opt`` by sending ``WONT``.

        Returns True if the request was sent.
        """
        state = self._state(opt)
        if state.local != L_WILL:
            self.log.debug('skip WONT {}; local = {}'.format(
                name_command(opt), state.local))
            return False
        self._set_local(state, L_WANTNO)
        self._send(WONT, opt)
        return True

    def enable_remote(self, opt):
        """
        Ask the peer to perform ``opt`` by sending ``DO``.

        Returns True if the request was sent.
        """
        state = self._state(opt)
        if state.remote != R_DONT:
            self.log.debug('skip DO {}; remote = {}'.format(
                name_command(opt), state.remote))
            return False
        self._set_remote(state, R_WANTYES)
        self._send(DO, opt)
        return True

    def disable_remote(self, opt):
        """
        Ask the peer to stop performing ``opt`` by sending ``DONT``.

        Returns True if the request was sent.
        """
        state = self._state(opt)
        if state.remote != R_DO:
            self.log.debug('skip DONT {}; remote = {}'.format(
                name_command(opt), state.remote))
            return False
        self._set_remote(state, R_WANTNO)
        self._send(DONT, opt)
        return True

    def __repr__(self):
        local = sorted(name_command(state.option) for state in self
                       if state.local_enabled)
        remote = sorted(name_command(state.option) for state in self
                        if state.remote_enabled)
        info = ['Negotiator']
        if local:
            info.append('will:{}'.format(','.join(local)))
        if remote:
            info.append('do:{}'.format(','.join(remote)))
        return '<{0}>'.format(' '.join(info))
