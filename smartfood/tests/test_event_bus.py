import unittest

from smartfood.events.Event_Bus import PANTRY_LOW_STOCK, EventBus


class TestEventBus(unittest.TestCase):

    def setUp(self):
        self.bus = EventBus()
        self.received = []

    def listener(self, event_name, payload):
        self.received.append((event_name, payload))

    def test_subscribe_publish_unsubscribe(self):
        self.bus.subscribe(PANTRY_LOW_STOCK, self.listener)
        self.bus.subscribe(PANTRY_LOW_STOCK, self.listener)
        self.bus.publish(PANTRY_LOW_STOCK, {"remaining": 1})
        self.assertEqual(self.received, [(PANTRY_LOW_STOCK, {"remaining": 1})])
        self.bus.unsubscribe(PANTRY_LOW_STOCK, self.listener)
        self.bus.unsubscribe(PANTRY_LOW_STOCK, self.listener)
        self.bus.publish(PANTRY_LOW_STOCK, {"remaining": 0})
        self.assertEqual(len(self.received), 1)

    def test_failing_subscriber_does_not_stop_delivery(self):
        def broken(event_name, payload):
            raise RuntimeError("boom")

        self.bus.subscribe(PANTRY_LOW_STOCK, broken)
        self.bus.subscribe(PANTRY_LOW_STOCK, self.listener)
        with self.assertLogs('smartfood.events.Event_Bus', level='ERROR'):
            self.bus.publish(PANTRY_LOW_STOCK, None)
        self.assertEqual(self.received, [(PANTRY_LOW_STOCK, None)])
