# tests/transport/test_bus.py
"""
chip8_tracer.transport.busモジュールの単体テスト。
"""
import pytest
from chip8_tracer.common.errors import MemoryAccessError
from chip8_tracer.transport.bus import Bus, Device, RAM, BusAccessType

# @intent:test_suite 共通バスとRAMデバイスの基本的な機能とエラーハンドリングを検証します。

class TestRAM:
    """
    RAMデバイスの単体テスト。
    """
    # @intent:test_case_init RAMクラスが正しいサイズで初期化されることを検証します。
    def test_ram_init_valid_size(self):
        ram = RAM(16)
        assert ram.get_size() == 16
        assert all(ram.read(i) == 0 for i in range(16))

    def test_ram_init_invalid_size(self):
        with pytest.raises(ValueError, match="RAM size must be a positive integer."):
            RAM(0)
        with pytest.raises(ValueError, match="RAM size must be a positive integer."):
            RAM(-1)
        with pytest.raises(ValueError, match="RAM size must be a positive integer."):
            RAM(1.5)

    def test_ram_read_write_within_bounds(self):
        ram = RAM(4)
        ram.write(0, 0x12)
        ram.write(3, 0x78)
        assert ram.read(0) == 0x12
        assert ram.read(3) == 0x78

    # @intent:test_case_oob 境界外アドレスへのアクセス時にIndexErrorが発生することを検証します。
    def test_ram_read_write_out_of_bounds(self):
        ram = RAM(4)
        with pytest.raises(IndexError, match="Address 4 out of bounds for RAM of size 4."):
            ram.read(4)
        with pytest.raises(IndexError, match="Address -1 out of bounds for RAM of size 4."):
            ram.write(-1, 0x00)

    def test_ram_write_invalid_data(self):
        ram = RAM(1)
        with pytest.raises(ValueError, match="Data 256 is not an 8-bit value."):
            ram.write(0, 0x100)

class TestBus:
    """
    Busの単体テスト。
    """
    @pytest.fixture
    def bus(self):
        bus = Bus()
        bus.register_device(0x000, 0xFFF, RAM(0x1000))
        return bus

    # @intent:test_case_logging 読み書きがアクティビティログに記録されることを検証します。
    def test_read_write_are_logged(self, bus):
        bus.write(0x300, 0x42)
        assert bus.read(0x300) == 0x42
        log = bus.get_and_clear_activity_log()
        assert len(log) == 2
        assert log[0].access_type == BusAccessType.WRITE
        assert log[0].address == 0x300
        assert log[0].data == 0x42
        assert log[0].previous_data == 0x00
        assert log[1].access_type == BusAccessType.READ
        assert bus.get_and_clear_activity_log() == []

    def test_write_records_previous_value(self, bus):
        bus.write(0x300, 0x11)
        bus.write(0x300, 0x22)
        log = bus.get_and_clear_activity_log()
        assert log[1].previous_data == 0x11

    # @intent:test_case_backdoor peekとloadはログを残さないことを検証します。
    def test_peek_and_load_do_not_log(self, bus):
        bus.load(0x200, 0x60)
        assert bus.peek(0x200) == 0x60
        assert bus.get_and_clear_activity_log() == []

    def test_unmapped_access_raises_memory_access_error(self, bus):
        with pytest.raises(MemoryAccessError):
            bus.read(0x1000)
        with pytest.raises(MemoryAccessError):
            bus.write(0x1000, 0xFF)
        # IndexErrorとしても捕捉できる
        with pytest.raises(IndexError):
            bus.peek(0x2000)

    def test_is_mapped(self, bus):
        assert bus.is_mapped(0x000)
        assert bus.is_mapped(0xFFD, 3)
        assert not bus.is_mapped(0xFFE, 3)
        assert not bus.is_mapped(-1)

    def test_register_device_invalid_range(self):
        bus = Bus()
        with pytest.raises(ValueError):
            bus.register_device(0x200, 0x100, RAM(0x100))
        with pytest.raises(ValueError):
            bus.register_device(-1, 0x100, RAM(0x100))

    def test_register_device_size_mismatch(self):
        bus = Bus()
        with pytest.raises(ValueError):
            bus.register_device(0x000, 0x0FF, RAM(0x200))

    def test_register_non_device(self):
        bus = Bus()
        with pytest.raises(TypeError):
            bus.register_device(0x000, 0x0FF, object())

    # @intent:test_case_multi_device 複数デバイスにオフセット付きでディスパッチされることを検証します。
    def test_dispatch_to_multiple_devices(self):
        class ConstantDevice(Device):
            def read(self, address):
                return 0x80 | address
            def write(self, address, data):
                pass

        bus = Bus()
        bus.register_device(0x000, 0x0FF, RAM(0x100))
        bus.register_device(0x100, 0x10F, ConstantDevice())
        assert bus.read(0x105) == 0x85
        bus.write(0x010, 0x33)
        assert bus.read(0x010) == 0x33
